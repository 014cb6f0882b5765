"""TOML rule-set loading.

Reads rule sets with the standard library ``tomllib``, validates their shape
(RawRuleSet.from_dict) and compiles them. ``load_config_with_imports``
additionally follows the ``imports`` list of each file.

Example:
    >>> from rulelex.loader import load_config
    >>> config = load_config("rules/abap.toml")

"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path

from rulelex.config import CompiledConfig, compile_config
from rulelex.errors import ConfigParseError, ConfigReadError, ConfigurationError
from rulelex.rules import RawRuleSet
from rulelex.utils.logger import get_logger

logger = get_logger(__name__)

StrPath = str | os.PathLike[str]


def parse_rule_set(text: str, path: str | None = None) -> RawRuleSet:
    """Parse TOML text into a RawRuleSet.

    Args:
        text: TOML document
        path: Identity of the source, used in error messages

    Raises:
        ConfigParseError: If the text is not valid TOML or has the wrong shape
        MissingFieldError: If a required section or field is absent
    """
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigParseError(f"invalid TOML: {exc}", path=path) from exc
    return RawRuleSet.from_dict(data, path=path)


def load_raw_rule_set(path: StrPath) -> RawRuleSet:
    """Read and validate a TOML rule-set file.

    Raises:
        ConfigReadError: If the file cannot be read
        ConfigParseError: If the file is not valid TOML or has the wrong shape
        MissingFieldError: If a required section or field is absent
    """
    name = os.fspath(path)
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigReadError(name, str(exc)) from exc
    logger.debug("Loaded rule set %s", name)
    return parse_rule_set(text, path=name)


def load_config(path: StrPath) -> CompiledConfig:
    """Read, validate and compile a TOML rule-set file.

    The file's ``imports`` are recorded on the result but not followed; use
    load_config_with_imports for that.
    """
    return compile_config(load_raw_rule_set(path), path=os.fspath(path))


def load_config_with_imports(path: StrPath) -> CompiledConfig:
    """Load a rule set and merge in everything it imports.

    Import paths are resolved relative to the importing file. Each import is
    loaded (with its own imports, depth first) and merged into the importer
    with CompiledConfig.merge; its special rules are appended after the
    importer's. A file reached twice is merged only once.

    Raises:
        ConfigurationError: On an import cycle
        ConfigError: Any loading or compilation failure, from any file
    """
    return _load_tree(Path(path).resolve(), stack=[], seen=set())


def _load_tree(path: Path, stack: list[Path], seen: set[Path]) -> CompiledConfig:
    if path in stack:
        chain = " -> ".join(p.name for p in [*stack, path])
        raise ConfigurationError(f"import cycle: {chain}", path=str(stack[-1]))

    seen.add(path)
    config = load_config(path)
    stack.append(path)
    try:
        for entry in config.imports or ():
            target = (path.parent / entry).resolve()
            if target in seen and target not in stack:
                logger.debug("Skipping %s, already imported", target)
                continue
            imported = _load_tree(target, stack, seen)
            config.merge(imported)
            config.extend_special_rules(imported.special_rules)
            logger.debug("Imported %s into %s", target, path)
    finally:
        stack.pop()
    return config
