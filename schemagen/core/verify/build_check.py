"""
Compile checks for generated sources.

Used by tests and tooling to confirm emitted code is accepted by the target
toolchain. The generator itself never calls into this module.
"""
from __future__ import annotations

import logging
import os
import shutil
import subprocess
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from schemagen.core.errors import CompilerNotFoundError

_log = logging.getLogger("schemagen.verify")

_CANDIDATES = ("cc", "gcc", "clang")
_CXX_CANDIDATES = ("c++", "g++", "clang++")


@dataclass(frozen=True)
class BuildCheckResult:
    ok: bool
    command: List[str] = field(default_factory=list)
    stdout: str = ""
    stderr: str = ""


def _which_first(names: Sequence[Optional[str]]) -> Optional[str]:
    for name in names:
        if not name:
            continue
        found = shutil.which(name)
        if found:
            return found
    return None


def find_c_compiler(preferred: Optional[str] = None) -> str:
    """preferred, then $SCHEMAGEN_CC, then $CC, then the first of cc/gcc/clang on PATH."""
    found = _which_first((preferred, os.getenv("SCHEMAGEN_CC"), os.getenv("CC"), *_CANDIDATES))
    if found is None:
        raise CompilerNotFoundError("no C compiler found (set SCHEMAGEN_CC or CC)")
    return found


def find_cxx_compiler(preferred: Optional[str] = None) -> str:
    """preferred, then $SCHEMAGEN_CXX, then $CXX, then the first of c++/g++/clang++ on PATH."""
    found = _which_first((preferred, os.getenv("SCHEMAGEN_CXX"), os.getenv("CXX"), *_CXX_CANDIDATES))
    if found is None:
        raise CompilerNotFoundError("no C++ compiler found (set SCHEMAGEN_CXX or CXX)")
    return found


def check_c_source(
    source: str,
    *,
    header_name: str = "objectbox-model.h",
    runtime_header: str = "objectbox.h",
    include_dirs: Sequence[Path] = (),
    compiler: Optional[str] = None,
    cplusplus: bool = False,
    timeout: int = 60,
) -> BuildCheckResult:
    """
    Write the generated header plus a minimal main.c (main.cpp with
    cplusplus=True) that includes it and run the compiler in syntax-only mode.
    """
    if cplusplus:
        cc, std, main_name = find_cxx_compiler(compiler), "-std=c++11", "main.cpp"
    else:
        cc, std, main_name = find_c_compiler(compiler), "-std=c99", "main.c"

    with tempfile.TemporaryDirectory(prefix="schemagen-check-") as tmp:
        tmp_dir = Path(tmp)
        (tmp_dir / header_name).write_text(source, encoding="utf-8")

        main_src = (
            f'#include "{runtime_header}"\n'
            f'#include "{header_name}"\n'
            "int main(void) { return 0; }\n"
        )
        main_file = tmp_dir / main_name
        main_file.write_text(main_src, encoding="utf-8")

        cmd = [cc, std, "-fsyntax-only", "-Wall", "-I", str(tmp_dir)]
        for d in include_dirs:
            cmd += ["-I", str(Path(d).resolve())]
        cmd.append(str(main_file))

        r = subprocess.run(cmd, capture_output=True, text=True, cwd=str(tmp_dir), timeout=timeout)

    if r.returncode != 0:
        _log.warning("%s syntax check failed: %s", "C++" if cplusplus else "C", (r.stderr or r.stdout).strip())
    return BuildCheckResult(ok=r.returncode == 0, command=cmd, stdout=r.stdout, stderr=r.stderr)


def check_python_source(source: str, *, filename: str = "<generated>") -> BuildCheckResult:
    try:
        compile(source, filename, "exec")
    except SyntaxError as exc:
        return BuildCheckResult(ok=False, command=["compile", filename], stderr=f"{exc.msg} (line {exc.lineno})")
    return BuildCheckResult(ok=True, command=["compile", filename])
