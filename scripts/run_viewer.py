#!/usr/bin/env python3
"""
Classroom page entrypoint - opens the terminal timeline against a running API.
"""

import sys
from pathlib import Path

# Load environment variables from .env file first
import dotenv
dotenv.load_dotenv()

# Add project root to path for imports (baybridge/ and tui/ are both in project root)
sys.path.insert(0, str(Path(__file__).parent.parent))


def main():
    """Launch the classroom page."""
    try:
        from tui.main import main as tui_main
    except ImportError as e:
        print(f"❌ Failed to import classroom page: {e}")
        print("   Make sure textual is installed: pip install textual")
        return 1

    try:
        tui_main()
    except Exception as e:
        print(f"❌ Classroom page failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
