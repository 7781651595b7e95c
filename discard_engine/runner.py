"""
Runner for analyzing C# sources with the registered rules.

Parses each file into an immutable document, builds a resolver over its
declarations and runs every enabled rule. Files can be processed in
parallel: documents and resolvers are never shared between files, and a
single document is only ever read.
"""

import concurrent.futures
import importlib
import logging
from typing import List, Optional

from .config import EngineConfig, get_default_config
from .csharp_adapter import default_csharp_adapter
from .csharp_resolver import CSharpSymbolResolver
from .document import Document
from .errors import DiscardEngineError
from .registry import get_enabled_rules
from .types import Diagnostic, LanguageAdapter, RuleContext, SemanticResolver

logger = logging.getLogger(__name__)

RULE_PACKAGES = ["discard_rules"]


def ensure_rules_loaded() -> None:
    """Import the rule packages so that they register themselves."""
    for package_name in RULE_PACKAGES:
        importlib.import_module(package_name)


def analyze_document(document: Document, resolver: Optional[SemanticResolver] = None,
                     config: Optional[EngineConfig] = None) -> List[Diagnostic]:
    """Run the enabled rules over one document, in document order."""
    ensure_rules_loaded()
    config = config or get_default_config()
    resolver = resolver or CSharpSymbolResolver(document)
    ctx = RuleContext(document=document, resolver=resolver, config=config)

    diagnostics: List[Diagnostic] = []
    for rule in get_enabled_rules(config.enabled_rules, document.language):
        diagnostics.extend(rule.visit(ctx))
    diagnostics.sort(key=lambda d: (d.span, d.rule_id))
    return diagnostics


def analyze_source(text: str, file_path: str = "<memory>", config: Optional[EngineConfig] = None,
                   adapter: Optional[LanguageAdapter] = None) -> List[Diagnostic]:
    adapter = adapter or default_csharp_adapter
    document = adapter.build_document(text, file_path)
    return analyze_document(document, config=config)


def analyze_file(file_path: str, config: Optional[EngineConfig] = None,
                 adapter: Optional[LanguageAdapter] = None) -> List[Diagnostic]:
    with open(file_path, 'r', encoding='utf-8', newline='') as f:
        text = f.read()
    return analyze_source(text, file_path, config, adapter)


def analyze_paths(paths: List[str], config: Optional[EngineConfig] = None,
                  adapter: Optional[LanguageAdapter] = None) -> List[Diagnostic]:
    """
    Analyze every source file under ``paths``.

    Findings keep file order, then document order, and are capped at
    ``config.max_total_findings`` when it is set. A file that fails to read or parse is
    logged and skipped.
    """
    config = config or get_default_config()
    adapter = adapter or default_csharp_adapter
    files = adapter.list_files(paths, config.exclude_dirs)
    logger.info("Analyzing %d files with %d job(s)", len(files), config.jobs)

    if config.jobs <= 1:
        file_results = [_analyze_file_safely(file_path, config, adapter) for file_path in files]
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=config.jobs) as executor:
            futures = [executor.submit(_analyze_file_safely, file_path, config, adapter)
                       for file_path in files]
            file_results = [future.result() for future in futures]

    all_diagnostics: List[Diagnostic] = [diagnostic for diagnostics in file_results for diagnostic in diagnostics]
    limit = config.max_total_findings
    if limit is not None and len(all_diagnostics) > limit:
        logger.warning("Dropping %d of %d findings over max_total_findings=%d",
                       len(all_diagnostics) - limit, len(all_diagnostics), limit)
        all_diagnostics = all_diagnostics[:limit]
    return all_diagnostics


def _analyze_file_safely(file_path: str, config: EngineConfig,
                         adapter: LanguageAdapter) -> List[Diagnostic]:
    try:
        return analyze_file(file_path, config, adapter)
    except (OSError, UnicodeDecodeError, DiscardEngineError) as e:
        logger.warning("Failed to process %s: %s", file_path, e)
        return []
