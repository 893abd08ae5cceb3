import os
import signal

import pytest

from kubehelper.signals import SHUTDOWN_SIGNALS, setup_signal_event


@pytest.fixture
def restore_handlers():
    saved = {sig: signal.getsignal(sig) for sig in SHUTDOWN_SIGNALS}
    yield
    for sig, handler in saved.items():
        signal.signal(sig, handler)


def test_signal_event_lifecycle(restore_handlers, capsys):
    event = setup_signal_event()
    assert not event.is_set()

    # Both shutdown signals share the same handler.
    assert signal.getsignal(signal.SIGINT) is signal.getsignal(signal.SIGTERM)
    assert signal.getsignal(signal.SIGINT) is not signal.default_int_handler

    # Only one setup per process is allowed.
    with pytest.raises(RuntimeError):
        setup_signal_event()

    os.kill(os.getpid(), signal.SIGTERM)
    assert event.wait(2.0)
    assert capsys.readouterr().out == "\n"