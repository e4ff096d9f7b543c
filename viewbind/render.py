"""
viewbind/render.py
==================

Python emission backend for binder descriptions.

Turns a ``BinderFile`` into the source text of a Python module holding
the generated binder class.  Rendering rules:

* private fields become class attributes prefixed with the binder's
  qualified name (``_pkg_Main_ViewBinding__target``) defaulting to
  ``None``; every binder in a parent chain keeps its own, even when two
  binders share a simple name
* ``ClassName`` references are imported as ``from <package> import <Top>``
  and spelled through the nesting chain (``View.OnClickListener``)
* parent binders live in their own module ``<package>.<Binder>`` unless
  they are rendered into the same module
* ``Cast`` becomes ``typing.cast``; the ``final`` modifier becomes
  ``@typing.final``
* anonymous callback objects are hoisted into a local class declared
  right before the statement that instantiates them
"""

from __future__ import annotations

import keyword
import logging
import re
from io import StringIO
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Sequence, Set, Tuple, Union

from viewbind.config import BinderConfig
from viewbind.errors import CodeGenError, ErrorCodes
from viewbind.types import (
    ClassName,
    ParameterizedTypeName,
    PrimitiveType,
    TypeName,
    WildcardTypeName,
)
from viewbind.typespec import (
    AnonymousObject,
    Assign,
    Attribute,
    BinderFile,
    Blank,
    Call,
    CallbackSpec,
    Cast,
    Compare,
    ExprStmt,
    FieldRef,
    If,
    Literal,
    LocalDecl,
    MethodSpec,
    Modifier,
    Name,
    Node,
    Raise,
    Raw,
    Return,
    Stmt,
    SuperCall,
    TypeRef,
    TypeSpec,
)

__all__ = [
    "CodeEmitter",
    "PythonRenderer",
    "render_file",
    "render_module",
    "module_path",
    "write_file",
]

logger = logging.getLogger(__name__)

PRIMITIVE_PY_TYPES: Dict[str, str] = {
    "void": "None",
    "boolean": "bool",
    "byte": "int",
    "char": "str",
    "double": "float",
    "float": "float",
    "int": "int",
    "long": "int",
    "short": "int",
}


# ═══════════════════════════════════════════════════════════════════════════
# CODE EMITTER
# ═══════════════════════════════════════════════════════════════════════════

class CodeEmitter:
    """Line-oriented output buffer with indentation tracking."""

    def __init__(self, indent_str: str = "    ") -> None:
        self._buffer = StringIO()
        self._indent_str = indent_str
        self._indent_level = 0

    def emit(self, code: str) -> None:
        """Emit a line of code at the current indentation."""
        if code.strip():
            self._buffer.write(self._indent_str * self._indent_level)
            self._buffer.write(code)
        self._buffer.write("\n")

    def emit_blank(self, count: int = 1) -> None:
        for _ in range(count):
            self._buffer.write("\n")

    def emit_comment(self, text: str) -> None:
        for line in text.split("\n"):
            self.emit(f"# {line}")

    def indent(self) -> None:
        self._indent_level += 1

    def dedent(self) -> None:
        self._indent_level = max(0, self._indent_level - 1)

    def block(self, header: str) -> "CodeEmitter._BlockContext":
        """Context manager for indented blocks."""
        return self._BlockContext(self, header)

    class _BlockContext:
        def __init__(self, emitter: "CodeEmitter", header: str) -> None:
            self._emitter = emitter
            self._header = header

        def __enter__(self) -> "CodeEmitter":
            self._emitter.emit(self._header)
            self._emitter.indent()
            return self._emitter

        def __exit__(self, *args: Any) -> None:
            self._emitter.dedent()

    def get_code(self) -> str:
        return self._buffer.getvalue()

    @staticmethod
    def make_identifier(name: str) -> str:
        """Convert a name to a valid Python identifier."""
        result = name.replace("$", "_").replace("-", "_")
        result = re.sub(r"[^a-zA-Z0-9_]", "", result)
        if result and result[0].isdigit():
            result = "_" + result
        if keyword.iskeyword(result):
            result = result + "_"
        return result or "_unnamed"


# ═══════════════════════════════════════════════════════════════════════════
# IMPORTS
# ═══════════════════════════════════════════════════════════════════════════

class _Imports:
    """``from module import name`` lines needed by one rendered module."""

    def __init__(self) -> None:
        self._by_module: Dict[str, Set[str]] = {}
        self._owner: Dict[str, str] = {}

    def add(self, module: str, name: str) -> None:
        owner = self._owner.get(name)
        if owner is not None and owner != module:
            raise CodeGenError(
                f"Name {name!r} would be imported from both {owner} and {module}",
                hint="rename one of the types or render the binders separately",
            )
        self._owner[name] = module
        self._by_module.setdefault(module, set()).add(name)

    def lines(self) -> List[str]:
        modules = sorted(self._by_module, key=lambda m: (m != "typing", m))
        return [f"from {m} import {', '.join(sorted(self._by_module[m]))}" for m in modules]


def _strip_blanks(body: Iterable[Stmt]) -> List[Stmt]:
    """Drop leading, trailing and repeated separators."""
    result: List[Stmt] = []
    for stmt in body:
        if isinstance(stmt, Blank) and (not result or isinstance(result[-1], Blank)):
            continue
        result.append(stmt)
    while result and isinstance(result[-1], Blank):
        result.pop()
    return result


# ═══════════════════════════════════════════════════════════════════════════
# RENDERER
# ═══════════════════════════════════════════════════════════════════════════

class PythonRenderer:
    """Render ``TypeSpec`` descriptions as Python class definitions.

    One renderer instance renders one module; *local_names* lists the
    binder classes (as dotted names) defined in that module.
    """

    def __init__(self, config: Optional[BinderConfig] = None,
                 local_names: FrozenSet[str] = frozenset()) -> None:
        self.config = config or BinderConfig()
        self.local_names = local_names
        self.imports = _Imports()
        self._out = CodeEmitter(self.config.indent)
        self._type_spec: Optional[TypeSpec] = None
        self._pending: List[Tuple[str, CallbackSpec]] = []
        self._callback_count = 0

    # -- types -----------------------------------------------------------

    def type_expr(self, type_name: TypeName) -> str:
        if isinstance(type_name, PrimitiveType):
            return PRIMITIVE_PY_TYPES[type_name.keyword]
        if isinstance(type_name, (ParameterizedTypeName, WildcardTypeName)):
            return self.type_expr(type_name.raw)
        if isinstance(type_name, ClassName):
            names = [CodeEmitter.make_identifier(n) for n in type_name.simple_names]
            if type_name.package not in ("", "builtins") and str(type_name) not in self.local_names:
                self.imports.add(type_name.package, names[0])
            return ".".join(names)
        raise CodeGenError(f"Cannot render type {type_name!r}",
                           code=ErrorCodes.UNSUPPORTED_NODE)

    def binder_expr(self, binder: ClassName) -> str:
        """Reference a generated binder, importing it from its own module."""
        name = CodeEmitter.make_identifier(binder.simple_name)
        if str(binder) not in self.local_names:
            module = f"{binder.package}.{name}" if binder.package else name
            self.imports.add(module, name)
        return name

    # -- expressions -----------------------------------------------------

    def expr(self, node: Node) -> str:
        return node.accept(self)

    def _args(self, args: Sequence[Node]) -> str:
        return ", ".join(self.expr(arg) for arg in args)

    def visit_name(self, node: Name) -> str:
        return node.id

    def visit_literal(self, node: Literal) -> str:
        return repr(node.value)

    def visit_raw(self, node: Raw) -> str:
        return node.code

    def visit_attribute(self, node: Attribute) -> str:
        return f"{self.expr(node.value)}.{node.attr}"

    def visit_field_ref(self, node: FieldRef) -> str:
        return f"self.{self._field_attr(node.name)}"

    def visit_call(self, node: Call) -> str:
        return f"{self.expr(node.func)}({self._args(node.args)})"

    def visit_super_call(self, node: SuperCall) -> str:
        method = "__init__" if node.method == MethodSpec.CONSTRUCTOR else node.method
        return f"super().{method}({self._args(node.args)})"

    def visit_type_ref(self, node: TypeRef) -> str:
        return self.type_expr(node.type)

    def visit_cast(self, node: Cast) -> str:
        self.imports.add("typing", "cast")
        return f"cast({self.type_expr(node.type)}, {self.expr(node.value)})"

    def visit_compare(self, node: Compare) -> str:
        return f"{self.expr(node.left)} {node.op} {self.expr(node.right)}"

    def visit_anonymous_object(self, node: AnonymousObject) -> str:
        self._callback_count += 1
        base = node.callback.supertype
        simple = base.simple_name if isinstance(base, ClassName) else "Callback"
        name = f"_{CodeEmitter.make_identifier(simple)}{self._callback_count}"
        self._pending.append((name, node.callback))
        return f"{name}()"

    def generic_visit(self, node: Node) -> str:
        raise CodeGenError(
            f"Cannot render node of type {type(node).__name__}",
            code=ErrorCodes.UNSUPPORTED_NODE,
        )

    # -- statements ------------------------------------------------------

    def _field_attr(self, name: str) -> str:
        type_spec = self._type_spec
        spec = type_spec.field(name) if type_spec is not None else None
        if type_spec is None or spec is None:
            raise CodeGenError(f"Reference to undeclared field {name!r}")
        ident = CodeEmitter.make_identifier(name)
        if spec.visibility is not Modifier.PRIVATE:
            return ident
        # Qualified prefix: binders in one chain may share a simple name.
        owner = CodeEmitter.make_identifier(str(type_spec.name).replace(".", "_"))
        return f"_{owner}__{ident}"

    def _statement_text(self, stmt: Stmt) -> str:
        if isinstance(stmt, Assign):
            return f"{self.expr(stmt.target)} = {self.expr(stmt.value)}"
        if isinstance(stmt, ExprStmt):
            return self.expr(stmt.value)
        if isinstance(stmt, Raise):
            return f"raise {self.type_expr(stmt.exc_type)}({stmt.message!r})"
        if isinstance(stmt, Return):
            return "return" if stmt.value is None else f"return {self.expr(stmt.value)}"
        if isinstance(stmt, LocalDecl):
            return f"{stmt.name} = None"
        raise CodeGenError(f"Cannot render statement {type(stmt).__name__}",
                           code=ErrorCodes.UNSUPPORTED_NODE)

    def emit_body(self, body: Iterable[Stmt]) -> None:
        statements = _strip_blanks(body)
        if not statements:
            self._out.emit("pass")
            return
        for stmt in statements:
            self.emit_statement(stmt)

    def emit_statement(self, stmt: Stmt) -> None:
        if isinstance(stmt, Blank):
            self._out.emit_blank()
            return
        if isinstance(stmt, If):
            with self._out.block(f"if {self.expr(stmt.condition)}:"):
                self.emit_body(stmt.body)
            return
        mark = len(self._pending)
        text = self._statement_text(stmt)
        hoisted = self._pending[mark:]
        del self._pending[mark:]
        for name, callback in hoisted:
            self._emit_callback_class(name, callback)
        self._out.emit(text)

    def _emit_callback_class(self, name: str, callback: CallbackSpec) -> None:
        with self._out.block(f"class {name}({self.type_expr(callback.supertype)}):"):
            for index, method in enumerate(callback.methods):
                if index:
                    self._out.emit_blank()
                self._emit_method(method, method.name)

    def _emit_method(self, method: MethodSpec, name: str) -> None:
        params = ["self"]
        for param in method.parameters:
            if param.default is None:
                params.append(param.name)
            else:
                params.append(f"{param.name}={self.expr(param.default)}")
        with self._out.block(f"def {name}({', '.join(params)}):"):
            self.emit_body(method.body)

    # -- types -----------------------------------------------------------

    def emit_type(self, type_spec: TypeSpec) -> None:
        self._type_spec = type_spec
        if type_spec.superclass is not None:
            bases = [self.binder_expr(type_spec.superclass)]
        else:
            bases = [self.type_expr(iface) for iface in type_spec.interfaces]
        if type_spec.is_final:
            self.imports.add("typing", "final")
            self._out.emit("@final")
        name = CodeEmitter.make_identifier(type_spec.name.simple_name)
        header = f"class {name}({', '.join(bases)}):" if bases else f"class {name}:"
        with self._out.block(header):
            for spec in type_spec.fields:
                self._out.emit(f"{self._field_attr(spec.name)} = None")
            for method in type_spec.methods:
                if type_spec.fields or method is not type_spec.methods[0]:
                    self._out.emit_blank()
                method_name = "__init__" if method.is_constructor else method.name
                self._emit_method(method, method_name)
            if not type_spec.fields and not type_spec.methods:
                self._out.emit("pass")
        self._type_spec = None

    def render(self, files: Sequence[BinderFile]) -> str:
        """Render *files* into one module, in the given order."""
        for index, binder_file in enumerate(files):
            if index:
                self._out.emit_blank(2)
            self.emit_type(binder_file.type_spec)
        comment = next((f.file_comment for f in files if f.file_comment), "")
        header = CodeEmitter(self.config.indent)
        if comment:
            header.emit_comment(comment)
        for line in self.imports.lines():
            header.emit(line)
        header.emit_blank(2)
        return header.get_code() + self._out.get_code()


# ═══════════════════════════════════════════════════════════════════════════
# PUBLIC API
# ═══════════════════════════════════════════════════════════════════════════

def render_file(binder_file: BinderFile, config: Optional[BinderConfig] = None) -> str:
    """Render one binder as a standalone module."""
    local = frozenset({str(binder_file.type_spec.name)})
    return PythonRenderer(config, local).render([binder_file])


def render_module(files: Sequence[BinderFile], config: Optional[BinderConfig] = None) -> str:
    """Render several binders into one module; parents must precede children."""
    local = frozenset(str(f.type_spec.name) for f in files)
    return PythonRenderer(config, local).render(list(files))


def module_path(binder_file: BinderFile, outdir: Union[str, Path]) -> Path:
    """``OUTDIR/<package dirs>/<Binder>.py``."""
    directory = Path(outdir)
    if binder_file.package:
        directory = directory.joinpath(*binder_file.package.split("."))
    name = CodeEmitter.make_identifier(binder_file.type_spec.name.simple_name)
    return directory / f"{name}.py"


def write_file(binder_file: BinderFile, outdir: Union[str, Path],
               config: Optional[BinderConfig] = None) -> Path:
    path = module_path(binder_file, outdir)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_file(binder_file, config), encoding="utf-8")
    logger.debug("Wrote %s", path)
    return path
