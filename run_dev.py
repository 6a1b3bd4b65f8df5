#!/usr/bin/env python3
"""
Development server runner for the quote engine API.
Can be used without virtual environment if dependencies are installed system-wide.
"""
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

# Set environment variables
os.environ.setdefault("FLASK_APP", "quote_engine.app")
os.environ.setdefault("FLASK_ENV", "development")
os.environ.setdefault("FLASK_DEBUG", "1")

if __name__ == "__main__":
    try:
        from quote_engine.app import create_app
        from quote_engine.config.settings import SERVER_HOST, SERVER_PORT

        app = create_app()

        print("=" * 60)
        print("Quote Engine Development Server")
        print("=" * 60)
        print(f"Server starting at: http://localhost:{SERVER_PORT}")
        print(f"Quote API: http://localhost:{SERVER_PORT}/api/quotes/<request_id>")
        print(f"Environment: {os.getenv('FLASK_ENV', 'development')}")
        print(f"Debug mode: {os.getenv('FLASK_DEBUG', '0')}")
        print("=" * 60)
        print("Press Ctrl+C to stop the server")
        print("=" * 60)
        print()

        app.run(host=SERVER_HOST, port=SERVER_PORT, debug=True)

    except ImportError as e:
        print(f"ERROR: Missing dependency - {e}")
        print("\nPlease install dependencies:")
        print("  pip install -e .")
        sys.exit(1)
    except Exception as e:
        print(f"ERROR: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)
