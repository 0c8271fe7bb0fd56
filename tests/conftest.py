from __future__ import annotations

import os
import subprocess
import sys
import textwrap
from dataclasses import dataclass
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


LICENSE_MIT = """Permission is hereby granted, free of charge, to any
person obtaining a copy of this software and associated
documentation files (the "Software"), to deal in the
Software without restriction, including without
limitation the rights to use, copy, modify, merge,
publish, distribute, sublicense, and/or sell copies of
the Software, and to permit persons to whom the Software
is furnished to do so, subject to the following
conditions:

The above copyright notice and this permission notice
shall be included in all copies or substantial portions
of the Software.

THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF
ANY KIND, EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED
TO THE WARRANTIES OF MERCHANTABILITY, FITNESS FOR A
PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT
SHALL THE AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY
CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN ACTION
OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR
IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER
DEALINGS IN THE SOFTWARE.
"""


def _license_patch(old_header: str, new_header: str) -> str:
    # Blank context lines keep their leading space.
    return "\n".join(
        [
            f"--- {old_header}\t2020-05-20 18:44:09.709027472 +0200",
            f"+++ {new_header}\t2020-05-20 18:58:46.253762666 +0200",
            "@@ -8,9 +8,7 @@",
            " is furnished to do so, subject to the following",
            " conditions:",
            " ",
            "-The above copyright notice and this permission notice",
            "-shall be included in all copies or substantial portions",
            "-of the Software.",
            "+PATCHED",
            " ",
            ' THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF',
            " ANY KIND, EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED",
            "",
        ]
    )


@pytest.fixture()
def license_patch() -> str:
    """Plain ``diff -u`` patch replacing the MIT notice paragraph with ``PATCHED``."""
    return _license_patch("LICENSE-MIT", "LICENSE-MIT")


@pytest.fixture()
def github_license_patch() -> str:
    """The same patch with forge-style ``a/``/``b/`` path prefixes."""
    return _license_patch("a/LICENSE-MIT", "b/LICENSE-MIT")


@dataclass(slots=True)
class PatchProject:
    """Fixture payload: a config directory with a vendored source index."""

    root: Path
    config_path: Path
    vendor: Path

    @property
    def sandbox(self) -> Path:
        return self.root / "target" / "patch"

    def add_package(self, dirname: str, files: dict[str, str] | None = None) -> Path:
        """Create ``vendor/<dirname>`` populated with ``files`` (defaults to LICENSE-MIT)."""
        package_root = self.vendor / dirname
        package_root.mkdir(parents=True, exist_ok=True)
        for relative, content in (files or {"LICENSE-MIT": LICENSE_MIT}).items():
            target = package_root / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        return package_root

    def write_patch(self, relative: str, content: str) -> Path:
        target = self.root / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        return target

    def write_config(self, body: str) -> Path:
        self.config_path.write_text(textwrap.dedent(body).lstrip(), encoding="utf-8")
        return self.config_path

    def run_cli(self, *args: str) -> subprocess.CompletedProcess[str]:
        """Invoke ``python -m pkgpatch.cli`` with the provided arguments."""

        env = os.environ.copy()
        pythonpath = str(SRC)
        if env.get("PYTHONPATH"):
            pythonpath = os.pathsep.join([pythonpath, env["PYTHONPATH"]])
        env["PYTHONPATH"] = pythonpath

        command = [sys.executable, "-m", "pkgpatch.cli", *args]
        return subprocess.run(  # noqa: S603 - command constructed from known values
            command,
            cwd=self.root,
            env=env,
            capture_output=True,
            text=True,
            check=False,
        )


@pytest.fixture()
def patch_project(tmp_path: Path) -> PatchProject:
    """Project directory with an empty ``vendor`` source index and no config yet."""

    root = tmp_path / "project"
    vendor = root / "vendor"
    vendor.mkdir(parents=True)
    return PatchProject(root=root, config_path=root / "pkgpatch.yaml", vendor=vendor)
