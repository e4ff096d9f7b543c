# tests/test_errors.py
"""
Tests for error codes and the exception hierarchy.
"""

from viewbind.errors import (
    BindingRuntimeError,
    BindingsAlreadyClearedError,
    CodeGenError,
    DescriptionError,
    ErrorCode,
    ErrorCodes,
    ErrorPhase,
    TypeResolutionError,
    ViewBindError,
    ViewNotFoundError,
)


class TestErrorCode:

    def test_format(self):
        assert ErrorCodes.UNKNOWN_LISTENER.code == "VBND-1001"
        assert str(ErrorCodes.VIEW_NOT_FOUND) == "VBND-5000"
        assert ErrorCodes.VIEW_NOT_FOUND.phase is ErrorPhase.RUNTIME

    def test_equality(self):
        assert ErrorCode(1001, ErrorPhase.DESCRIPTION, "x") == ErrorCodes.UNKNOWN_LISTENER
        assert ErrorCodes.UNKNOWN_LISTENER == "VBND-1001"
        assert ErrorCodes.UNKNOWN_LISTENER != ErrorCodes.UNKNOWN_CALLBACK
        assert ErrorCodes.UNKNOWN_LISTENER != 1001
        assert len({ErrorCodes.UNKNOWN_LISTENER,
                    ErrorCode(1001, ErrorPhase.DESCRIPTION, "y")}) == 1


class TestExceptions:

    def test_default_codes(self):
        assert DescriptionError("x").code == ErrorCodes.MALFORMED_DESCRIPTION
        assert CodeGenError("x").code == ErrorCodes.UNSUPPORTED_NODE
        assert BindingsAlreadyClearedError("x").code == ErrorCodes.ALREADY_CLEARED

    def test_format_with_hint(self):
        err = DescriptionError("Unknown listener @OnTap", target="com.example.Main",
                               code=ErrorCodes.UNKNOWN_LISTENER).with_hint("see `listeners`")
        assert err.format() == (
            "error[VBND-1001]: com.example.Main: Unknown listener @OnTap "
            "(hint: see `listeners`)"
        )
        assert err.target == "com.example.Main"

    def test_type_resolution_message(self):
        err = TypeResolutionError("a..B", "empty segment")
        assert err.message == "Cannot resolve type name 'a..B': empty segment"
        assert err.type_name == "a..B"

    def test_hierarchy(self):
        err = ViewNotFoundError(5, "field 'x'")
        assert isinstance(err, BindingRuntimeError)
        assert isinstance(err, ViewBindError)
        assert not isinstance(DescriptionError("x"), BindingRuntimeError)
