"""
Pytest configuration file.

Puts the python/ directory on sys.path so tests import utils.* and scripts.*
the same way the entry point does.
"""
import sys
from pathlib import Path

_python_dir = Path(__file__).parent.parent / 'python'
_python_dir_abs = str(_python_dir.absolute())
if _python_dir_abs not in sys.path:
    sys.path.insert(0, _python_dir_abs)
