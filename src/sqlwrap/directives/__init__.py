from sqlwrap.directives.arg import ArgDirective, ArgInfo, ArgsInfo
from sqlwrap.directives.base import (
    Directive,
    DirectiveFactory,
    DirectiveRegistry,
    QuoteFunc,
    TextDirective,
)
from sqlwrap.directives.replace import ReplaceDirective
from sqlwrap.directives.var import VarDirective, VarsDirective, VarsInfo
from sqlwrap.directives.wildcard import (
    Marker,
    MarkerCodec,
    WildcardDirective,
    WildcardResolution,
)


def default_registry() -> DirectiveRegistry:
    """Return a registry with the built-in directives."""
    registry = DirectiveRegistry()
    registry.register(ArgDirective, "arg")
    registry.register(VarDirective, "var")
    registry.register(VarsDirective, "vars")
    registry.register(ReplaceDirective, "replace")
    registry.register(WildcardDirective, "wildcard")
    return registry


__all__ = [
    "ArgDirective",
    "ArgInfo",
    "ArgsInfo",
    "Directive",
    "DirectiveFactory",
    "DirectiveRegistry",
    "Marker",
    "MarkerCodec",
    "QuoteFunc",
    "ReplaceDirective",
    "TextDirective",
    "VarDirective",
    "VarsDirective",
    "VarsInfo",
    "WildcardDirective",
    "WildcardResolution",
    "default_registry",
]
