import sys
from pathlib import Path

# Ensure the backend root (api/, client/, services/, settings.py) is importable for direct pytest runs
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))
