# certctl/cli.py
"""
command line tool to generate ssl certificates and key

  certctl [-d] create [--endpoints IP ...] [--keyout ca.key] [--certout ca.crt]
  certctl [-d] inspect CERT [--key KEY]
"""
import argparse
import sys

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization

from certctl.common.config import CreateOptions, IssuanceConfig
from certctl.common.errors import CertctlError
from certctl.common.log import attach_handler, get_logger
from certctl.crypto import keys, pki
from certctl.create import run_create

LOGGER_NAME = "certctl.cli"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="certctl", description=__doc__.strip().splitlines()[0])
    parser.add_argument("-d", "--debug", action="store_true", help="enable debug mode")
    sub = parser.add_subparsers(dest="cmd")

    p_create = sub.add_parser("create", help="create self signed certificate and key")
    p_create.add_argument("--endpoints", action="append", metavar="IP",
                          help="ipaddrs of servers where this cert will be used (repeatable)")
    p_create.add_argument("--keyout", default="ca.key", help="file path to store private key")
    p_create.add_argument("--certout", default="ca.crt", help="file path to store certificate")
    p_create.add_argument("--bits", type=int, default=IssuanceConfig().key_bits, help="RSA modulus size")
    p_create.add_argument("--validity-years", type=int, default=IssuanceConfig().validity_years)
    p_create.add_argument("--organization", default=IssuanceConfig().subject_organization,
                          help="subject organization name")
    p_create.add_argument("--strict-endpoints", action="store_true",
                          help="fail on endpoints that are not IP addresses")
    p_create.add_argument("--atomic", action="store_true",
                          help="write both files or neither")

    p_inspect = sub.add_parser("inspect", help="print and verify an issued certificate")
    p_inspect.add_argument("cert")
    p_inspect.add_argument("--key", help="private key expected to match the certificate")
    return parser


def do_create(args, config: IssuanceConfig) -> int:
    opts = CreateOptions(
        ip_addresses=args.endpoints or ["127.0.0.1"],
        key_file=args.keyout,
        cert_file=args.certout,
    )
    run_create(opts, config)
    print("Wrote", opts.key_file, "and", opts.cert_file)
    return 0


def do_inspect(args, config: IssuanceConfig) -> int:
    log = get_logger(LOGGER_NAME, config)
    with open(args.cert, "rb") as f:
        cert = pki.load_cert(f.read())

    print("subject:    ", cert.subject.rfc4514_string())
    print("issuer:     ", cert.issuer.rfc4514_string())
    print("serial:     ", format(cert.serial_number, "x"))
    print("not before: ", cert.not_valid_before_utc.isoformat())
    print("not after:  ", cert.not_valid_after_utc.isoformat())
    print("ip sans:    ", ", ".join(str(ip) for ip in pki.cert_ip_addresses(cert)))
    print("sha256:     ", pki.cert_fingerprint_hex(cert))

    ok = True
    try:
        pki.verify_self_signed(cert)
        print("signature:   self-signed, valid")
    except (ValueError, InvalidSignature) as e:
        log.error("self-signature check failed: %s", str(e) or "bad signature")
        print("signature:   INVALID")
        ok = False

    if args.key:
        with open(args.key, "rb") as f:
            key_pem = f.read()
        try:
            priv = keys.load_private_key(key_pem)
        except (TypeError, ValueError, UnsupportedAlgorithm) as e:
            log.error("cannot load %s: %s", args.key, e)
            print("key:         cannot be loaded")
            return 1
        fmt = serialization.PublicFormat.SubjectPublicKeyInfo
        enc = serialization.Encoding.DER
        if priv.public_key().public_bytes(enc, fmt) == cert.public_key().public_bytes(enc, fmt):
            print("key:         matches certificate")
        else:
            print("key:         DOES NOT match certificate")
            ok = False
    return 0 if ok else 1


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.cmd is None:
        parser.print_help()
        return 2

    attach_handler()
    try:
        if args.cmd == "create":
            config = IssuanceConfig(
                debug=args.debug,
                key_bits=args.bits,
                validity_years=args.validity_years,
                subject_organization=args.organization,
                strict_addresses=args.strict_endpoints,
                atomic_writes=args.atomic,
            )
            return do_create(args, config)
        config = IssuanceConfig(debug=args.debug)
        return do_inspect(args, config)
    except (CertctlError, OSError, ValueError) as e:
        get_logger(LOGGER_NAME, IssuanceConfig(debug=args.debug)).critical("%s", e)
        return 1


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
