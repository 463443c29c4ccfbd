# scripts/gen_ca.py
"""
Create a Root CA (RSA key + self-signed X.509) for local use. Writes:
  certs/ca.key  (private)  -- DO NOT COMMIT
  certs/ca.crt  (public)
Extra arguments are passed on to `certctl create`, e.g. --endpoints 10.0.0.5
"""
import os
import sys

from certctl.cli import main as certctl_main

OUT_DIR = "certs"


def main(argv=None):
    os.makedirs(OUT_DIR, exist_ok=True)
    args = [
        "create",
        "--keyout", os.path.join(OUT_DIR, "ca.key"),
        "--certout", os.path.join(OUT_DIR, "ca.crt"),
        "--atomic",
    ]
    return certctl_main(args + list(argv if argv is not None else sys.argv[1:]))


if __name__ == "__main__":
    sys.exit(main())
