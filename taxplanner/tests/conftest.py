"""
Test configuration for taxplanner tests.

sys.path is configured so 'from taxplanner...' resolves whether pytest is run
from the project root or from inside taxplanner/tests/, with or without an
editable install.
"""
import sys
from pathlib import Path

_project_root = Path(__file__).parent.parent.parent   # .../<project root>/

if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))
