# certctl/create.py
"""
The `create` run: generate a key, self-sign a root certificate with it, then
write both PEM files. Nothing touches the disk until signing succeeded.
"""
import io

from certctl.common.config import CreateOptions, IssuanceConfig
from certctl.common.log import get_logger
from certctl.crypto import keys, pki
from certctl.storage import files


def run_create(opts: CreateOptions, config: IssuanceConfig = None):
    config = config or IssuanceConfig()
    log = get_logger(__name__, config)
    log.debug("options used: ip=%s key-file=%s cert-file=%s",
              opts.ip_addresses, opts.key_file, opts.cert_file)

    key_buf = io.BytesIO()
    cert_buf = io.BytesIO()

    priv = keys.create_rsa_key_pair(config.key_bits, key_buf, config)
    log.debug("\n%s", key_buf.getvalue().decode())

    tmpl = pki.cert_template(True, opts.ip_addresses, config)
    tmpl.key_usage = set(pki.ROOT_KEY_USAGE)
    tmpl.ext_key_usage = list(pki.ROOT_EXT_KEY_USAGE)

    cert = pki.create_cert(tmpl, tmpl, priv.public_key(), priv, cert_buf, config)
    log.debug("\n%s", cert_buf.getvalue().decode())

    files.save_artifacts([
        (opts.key_file, key_buf.getvalue(), files.KEY_FILE_MODE),
        (opts.cert_file, cert_buf.getvalue(), files.CERT_FILE_MODE),
    ], atomic=config.atomic_writes)
    return cert
