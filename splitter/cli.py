"""Command-line launcher for the HTTP server."""
import argparse
import sys

import uvicorn


def main(argv=None):
    p = argparse.ArgumentParser("bill-splitter", description="Run the bill splitter HTTP server.")
    p.add_argument("--host", default="0.0.0.0", help="interface to bind (default: all)")
    p.add_argument("--port", type=int, default=8080, help="HTTP port (default: 8080)")
    p.add_argument("--reload", action="store_true", help="restart on code changes")
    args = p.parse_args(argv)

    print(f"Bill splitter listening on http://localhost:{args.port}", file=sys.stderr)
    print("Every connected device sees the same shared bills.", file=sys.stderr)
    uvicorn.run("splitter.main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main(sys.argv[1:])
