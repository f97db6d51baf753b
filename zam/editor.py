import os
import re
import shlex
import subprocess
import tempfile
from pathlib import Path
from typing import Optional


def edit_text(initial: str, editor: Optional[str] = None, name: str = "alias") -> Optional[str]:
    """Open text in an external editor and return the edited result.

    Returns None when the editor exits with an error or cannot be started.
    """
    editor = editor or os.environ.get("EDITOR") or "vi"
    safe_name = re.sub(r"[^\w.-]", "_", name)
    fd, tmp_name = tempfile.mkstemp(prefix=f"zam-edit-{safe_name}-", suffix=".sh")
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(initial)

        try:
            result = subprocess.run([*shlex.split(editor), str(tmp_path)])
        except FileNotFoundError:
            return None
        if result.returncode != 0:
            return None

        return tmp_path.read_text(encoding="utf-8").strip()
    finally:
        tmp_path.unlink(missing_ok=True)
