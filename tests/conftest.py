import sys
from pathlib import Path

# Ensure the src directory is on the Python path for imports
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / 'src'
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# Test helpers (mock_device_server, test_utils) are imported by module name
TESTS = Path(__file__).resolve().parent
if str(TESTS) not in sys.path:
    sys.path.insert(0, str(TESTS))
