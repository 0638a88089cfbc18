#!/usr/bin/env python3

"""Helper entrypoint for the Bitbucket Pipe container to invoke the uploader."""
import os
import shlex
import subprocess
import sys
from typing import List, Mapping, Optional


def _get_env(environ: Mapping[str, str], name: str) -> str:
    value = environ.get(name)
    if value is None:
        raise KeyError(f"Missing required pipe variable: {name}")
    return value


def build_command(environ: Mapping[str, str]) -> List[str]:
    cmd = ["parasoft-findings-bitbucket", "--report", _get_env(environ, "REPORT")]
    root = environ.get("PARASOFT_TOOL_OR_JAVA_ROOT_PATH")
    if root:
        cmd.extend(["--parasoftToolOrJavaRootPath", root])
    gates = [g.strip() for g in environ.get("QUALITY_GATES", "").split(",") if g.strip()]
    for gate in gates:
        cmd.extend(["--qualityGate", gate])
    if environ.get("DEBUG", "").lower() in {"1", "true", "yes"}:
        cmd.append("--debug")
    return cmd


def main(environ: Optional[Mapping[str, str]] = None) -> int:
    cmd = build_command(os.environ if environ is None else environ)
    print("Running:", " ".join(shlex.quote(part) for part in cmd))
    return subprocess.call(cmd)


if __name__ == "__main__":
    sys.exit(main())
