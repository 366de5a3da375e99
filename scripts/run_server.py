#!/usr/bin/env python3
"""
Start the BayBridge Classroom API with uvicorn.
Stream mode (S2 vs stub) and translation are decided by the environment.
"""

import sys
import argparse
from pathlib import Path

# Load environment variables from .env file first
import dotenv
dotenv.load_dotenv()

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import uvicorn

from baybridge.core.config import debug_enabled, get_stream_mode, translation_configured, validate_config


def main():
    parser = argparse.ArgumentParser(description='Serve the BayBridge Classroom API')
    parser.add_argument('--port', type=int, default=8000,
                       help='Port to serve on (default: 8000)')
    parser.add_argument('--host', default='127.0.0.1',
                       help='Host to bind to (default: 127.0.0.1)')
    parser.add_argument('--reload', action='store_true',
                       help='Reload on code changes (development only)')

    args = parser.parse_args()

    issues = validate_config()

    print("🌉 BayBridge Classroom API")
    print("=" * 50)
    print(f"🌐 Listening on: http://{args.host}:{args.port}")
    print(f"📡 Stream mode: {get_stream_mode()}")
    print(f"🈯 Translation: {'enabled' if translation_configured() else 'disabled (missing LINGODOTDEV_API_KEY)'}")
    for issue in issues:
        print(f"⚠️  {issue}")
    print("=" * 50)

    try:
        uvicorn.run(
            "baybridge.api.main:app",
            host=args.host,
            port=args.port,
            reload=args.reload,
            log_level="debug" if debug_enabled() else "info",
        )
    except KeyboardInterrupt:
        print("\n👋 Server stopped by user")
    return 0


if __name__ == "__main__":
    sys.exit(main())
