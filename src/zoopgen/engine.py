"""The resolution-and-generation run.

    scan every unit -> build and freeze the registry -> order the dependency
    graph -> flatten, copy and derive accessors wave by wave -> emit units

Scan errors are collected per unit and stop the run once scanning is done.
Every later phase fails fast. Output is all or nothing: `GenerationResult`
carries generated text only when the run succeeded, and the diagnostics
list in every case.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Iterable, Optional

from .accessors import generate_accessors
from .config import GeneratorConfig
from .decls import SourceUnit, UnitScan
from .diagnostics import Diagnostic, DiagnosticSink, Severity
from .emitter import Emitter, emit_unit
from .errors import ZoopError
from .flatten import FlattenedResult, Flattener
from .graph import GenerationPlan, build_plan
from .initializers import smart_init
from .methods import MethodCopier
from .registry import Registry
from .scanner import scan_unit

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    # unit name -> generated text; empty unless ok
    outputs: dict[str, str] = field(default_factory=dict)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    # Qualified names in generation order
    order: list[str] = field(default_factory=list)
    registry: Optional[Registry] = None
    results: dict[str, FlattenedResult] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.WARNING]


class Generator:
    def __init__(self, config: GeneratorConfig | None = None):
        self.config = config or GeneratorConfig()

    def run(self, units: Iterable[SourceUnit]) -> GenerationResult:
        units = list(units)
        sink = DiagnosticSink()
        result = GenerationResult()
        logger.info("generating %d unit(s)", len(units))

        scans = self.scan(units, sink)
        if sink.errors:
            logger.info("scan failed with %d error(s)", len(sink.errors))
            result.diagnostics = sink.items
            return result

        try:
            registry = Registry.build(scans)
            result.registry = registry
            logger.debug("registry holds %d declaration(s)", len(registry))
            plan = build_plan(registry, self.config.max_inheritance_depth)
            result.order = [registry.get(i).qualified_name for i in plan.order]
            resolved = self.resolve(registry, plan, sink)
            result.results = resolved
            outputs = self.emit(scans, resolved)
        except ZoopError as e:
            logger.info("generation failed: %s", e)
            sink.report(e)
            result.diagnostics = sink.items
            return result

        result.outputs = outputs
        result.diagnostics = sink.items
        logger.info("generated %d declaration(s) in %d unit(s)",
                    len(resolved), len(outputs))
        return result

    # ---- Phases ----

    def scan(self, units: list[SourceUnit], sink: DiagnosticSink) -> list[UnitScan]:
        """Scan all units; a failing unit does not stop the others."""
        scans: list[Optional[UnitScan]] = [None] * len(units)
        lock = threading.Lock()

        def work(index: int):
            scan = scan_unit(units[index], self.config.max_source_bytes)
            with lock:
                scans[index] = scan
                for err in scan.errors:
                    sink.report(err)

        self._map(work, range(len(units)))
        return scans

    def resolve(self, registry: Registry, plan: GenerationPlan,
                sink: DiagnosticSink) -> dict[str, FlattenedResult]:
        flattener = Flattener(registry, self.config)
        copier = MethodCopier(registry, self.config, sink)
        by_id: dict[int, FlattenedResult] = {}

        def work(decl_id: int) -> FlattenedResult:
            record = registry.get(decl_id)
            deps = [by_id[d] for d in plan.dependencies[decl_id]]
            result = FlattenedResult(decl_id, record.name)
            result.members = flattener.flatten(decl_id, deps)
            result.inherited_aliases = copier.inherited_aliases(decl_id, deps)
            result.self_aliases = result.inherited_aliases + [
                n for n in record.nested if n.is_self_alias]
            init = None
            if record.parent is not None:
                parent = deps[0]
                init = smart_init(record, registry.get(parent.decl_id), result, parent, sink)
            result.methods = copier.resolve(decl_id, deps, result.self_aliases, init)
            result.accessors = generate_accessors(result, self.config, registry, sink)
            return result

        for number, wave in enumerate(plan.waves):
            logger.debug("wave %d: %d declaration(s)", number, len(wave))
            # Results of one wave only read results of earlier waves
            for decl_id, flat in zip(wave, self._map(work, wave)):
                by_id[decl_id] = flat
        return {registry.get(i).qualified_name: by_id[i] for i in plan.order}

    def emit(self, scans: list[UnitScan],
             resolved: dict[str, FlattenedResult]) -> dict[str, str]:
        texts = self._map(lambda scan: emit_unit(scan, resolved, Emitter()), scans)
        return {scan.unit.name: text for scan, text in zip(scans, texts)}

    # ---- Fan-out ----

    def _map(self, fn, items) -> list:
        items = list(items)
        if self.config.jobs <= 1 or len(items) <= 1:
            return [fn(item) for item in items]
        with ThreadPoolExecutor(max_workers=self.config.jobs) as pool:
            # map() re-raises the first failure in submission order
            return list(pool.map(fn, items))


def generate(units: Iterable[SourceUnit], config: GeneratorConfig | None = None) -> GenerationResult:
    return Generator(config).run(units)
