"""Lexicon schema and record validation.

The public names below resolve on first access, so ``import lexicheck`` does
not pull in the validators (or ``regex``) until one of them is used.
"""

import importlib

mod = "lexicheck"

# module -> names it exports at package level
_exports = {
    "validator": ("validate", "validate_record"),
    "formats": ("is_valid_nsid", "validate_string_format"),
    "errors": ("LexiconError", "InvalidSchemaError", "DataValidationError", "LexiconNotFoundError"),
}


class LazyLoader:
    """
    Resolves package attributes to names in lexicheck submodules on demand.
    """
    def __init__(self, exports):
        self._modules = {}
        self._mappings = {
            name: f"{mod}.{module}" for module, names in exports.items() for name in names
        }

    def _load_module(self, module_name):
        if module_name not in self._modules:
            self._modules[module_name] = importlib.import_module(module_name)
        return self._modules[module_name]

    def names(self):
        return sorted(self._mappings)

    def __getattr__(self, item):
        if item in self._mappings:
            return getattr(self._load_module(self._mappings[item]), item)
        try:
            return self._load_module(f"{mod}.{item}")
        except ModuleNotFoundError as e:
            if e.name != f"{mod}.{item}":
                raise
            raise AttributeError(f"module '{mod}' has no attribute '{item}'") from e


_lazy_loader = LazyLoader(_exports)

__all__ = _lazy_loader.names()


def __getattr__(name):
    return getattr(_lazy_loader, name)


def __dir__():
    return sorted(set(globals()) | set(__all__))
