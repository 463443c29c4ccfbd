import io
import sys

import pytest

from certctl.common.log import attach_handler
from certctl.crypto import keys, pki


@pytest.fixture(autouse=True)
def log_to_current_stderr(capsys):
    # the handler keeps a stream reference; hand it back before capsys closes its buffer
    attach_handler()
    yield
    attach_handler(sys.__stderr__)


@pytest.fixture(scope="session")
def rsa_key():
    buf = io.BytesIO()
    priv = keys.create_rsa_key_pair(2048, buf)
    return priv, buf.getvalue()


@pytest.fixture
def root_template():
    tmpl = pki.cert_template(True, ["127.0.0.1", "10.0.0.5"])
    tmpl.key_usage = set(pki.ROOT_KEY_USAGE)
    tmpl.ext_key_usage = list(pki.ROOT_EXT_KEY_USAGE)
    return tmpl


@pytest.fixture
def root_cert(rsa_key, root_template):
    priv, _ = rsa_key
    out = io.BytesIO()
    cert = pki.create_cert(root_template, root_template, priv.public_key(), priv, out)
    return cert, out.getvalue()
