"""Loading configurations and benchmarks from a YAML suite file.

A suite looks like::

    configurations:
      - name: baseline
      - name: tip
        root: /usr/local/go-tip
        gc_flags: -d=ssa/check_bce
        after_build: [benchsize]

    benchmarks:
      - name: fib
        repo: example.com/fib
        benchmarks: BenchmarkFib
"""

from dataclasses import fields
from pathlib import Path
from typing import Any

import yaml

from bent.domain.models import Benchmark, Configuration

_LIST_KEYS = frozenset(
    {"build_flags", "after_build", "gc_env", "run_flags", "run_env", "run_wrapper"}
)
_CONFIG_KEYS = frozenset({"name", "root", "gc_flags", "disabled"}) | _LIST_KEYS
_BENCH_KEYS = frozenset(f.name for f in fields(Benchmark))


class SuiteError(ValueError):
    """Raised for a suite file that cannot be turned into a run."""


class Suite:
    """The configurations and benchmarks of one suite file."""

    def __init__(self, configurations: list[Configuration], benchmarks: list[Benchmark]) -> None:
        self.configurations = configurations
        self.benchmarks = benchmarks

    def select(self, config_names: list[str], bench_names: list[str]) -> "Suite":
        """Return the subset named, in suite order; empty lists keep everything."""
        return Suite(
            _pick(self.configurations, config_names, "configuration"),
            _pick(self.benchmarks, bench_names, "benchmark"),
        )


def _pick(items: list[Any], names: list[str], kind: str) -> list[Any]:
    if not names:
        return items
    known = {item.name for item in items}
    missing = [n for n in names if n not in known]
    if missing:
        msg = f"unknown {kind}(s): {', '.join(missing)}"
        raise SuiteError(msg)
    wanted = set(names)
    return [item for item in items if item.name in wanted]


def _as_list(value: object, key: str, owner: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return value.split()
    if isinstance(value, list):
        return [str(v) for v in value]  # type: ignore[misc]
    msg = f"{owner}: {key} must be a list or a string"
    raise SuiteError(msg)


def _check_keys(d: dict[str, Any], allowed: frozenset[str], owner: str) -> None:
    unknown = sorted(set(d) - allowed)
    if unknown:
        msg = f"{owner}: unknown key(s) {', '.join(unknown)}"
        raise SuiteError(msg)


def _name(d: dict[str, Any], kind: str, index: int) -> str:
    if not isinstance(d, dict):
        msg = f"{kind} #{index + 1} must be a mapping"
        raise SuiteError(msg)
    name = d.get("name")
    if not name:
        msg = f"{kind} #{index + 1} has no name"
        raise SuiteError(msg)
    return str(name)


def _configuration_from_dict(d: dict[str, Any], index: int) -> Configuration:
    name = _name(d, "configuration", index)
    owner = f"configuration {name}"
    _check_keys(d, _CONFIG_KEYS, owner)
    return Configuration(
        name=name,
        root=str(d.get("root", "") or ""),
        build_flags=_as_list(d.get("build_flags"), "build_flags", owner),
        after_build=_as_list(d.get("after_build"), "after_build", owner),
        gc_flags=str(d.get("gc_flags", "") or ""),
        gc_env=_as_list(d.get("gc_env"), "gc_env", owner),
        run_flags=_as_list(d.get("run_flags"), "run_flags", owner),
        run_env=_as_list(d.get("run_env"), "run_env", owner),
        run_wrapper=_as_list(d.get("run_wrapper"), "run_wrapper", owner),
        disabled=bool(d.get("disabled", False)),
    )


def _benchmark_from_dict(d: dict[str, Any], index: int, base_dir: Path) -> Benchmark:
    name = _name(d, "benchmark", index)
    owner = f"benchmark {name}"
    _check_keys(d, _BENCH_KEYS, owner)
    repo = d.get("repo")
    if not repo:
        msg = f"{owner} has no repo"
        raise SuiteError(msg)
    build_dir = base_dir / str(d["build_dir"]) if d.get("build_dir") else base_dir
    return Benchmark(
        name=name,
        repo=str(repo),
        build_dir=build_dir.resolve(),
        build_flags=_as_list(d.get("build_flags"), "build_flags", owner),
        gc_env=_as_list(d.get("gc_env"), "gc_env", owner),
        tests=str(d.get("tests", "") or ""),
        benchmarks=str(d.get("benchmarks", ".") or "."),
        run_env=_as_list(d.get("run_env"), "run_env", owner),
        run_wrapper=_as_list(d.get("run_wrapper"), "run_wrapper", owner),
        not_sandboxed=bool(d.get("not_sandboxed", False)),
        disabled=bool(d.get("disabled", False)),
    )


def load_suite(path: Path) -> Suite:
    """Load a suite file; relative ``build_dir`` values are relative to it."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"cannot read suite {path}: {exc}"
        raise SuiteError(msg) from exc
    try:
        data: dict[str, Any] = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        msg = f"cannot parse suite {path}: {exc}"
        raise SuiteError(msg) from exc
    if not isinstance(data, dict):
        msg = f"suite {path} must be a mapping"
        raise SuiteError(msg)

    base_dir = path.parent.resolve()
    configs_raw: list[dict[str, Any]] = data.get("configurations") or []
    benches_raw: list[dict[str, Any]] = data.get("benchmarks") or []
    return Suite(
        [_configuration_from_dict(d, i) for i, d in enumerate(configs_raw)],
        [_benchmark_from_dict(d, i, base_dir) for i, d in enumerate(benches_raw)],
    )
