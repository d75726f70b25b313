"""Shared fixtures for the tracegen test suite."""

import threading

import pytest


def pytest_configure(config):
    config.addinivalue_line(
        "markers",
        "intentionally_leaves_dangling_threads: mark test as intentionally leaving threads alive",
    )


@pytest.fixture(autouse=True)
def _check_thread_cleanup(request):
    """Fail any test that leaves worker threads running.

    The driver starts daemon threads, so a leak would not block pytest at
    exit; it would silently keep mutating a set nobody looks at any more.
    """
    initial_threads = set(threading.enumerate())

    yield

    new_threads = set(threading.enumerate()) - initial_threads
    main_thread = threading.main_thread()
    alive_threads = [t for t in new_threads if t != main_thread and t.is_alive()]

    if alive_threads and not request.node.get_closest_marker("intentionally_leaves_dangling_threads"):
        thread_info = ", ".join(
            f"{t.name} ({'daemon' if t.daemon else 'NON-DAEMON'}, ident={t.ident})" for t in alive_threads
        )
        pytest.fail(
            f"Test {request.node.nodeid} left {len(alive_threads)} thread(s) running: {thread_info}. "
            f"All threads must be joined before test completion."
        )


@pytest.fixture
def trace_lines():
    """Split a trace into its initial-contents line and its operation lines."""

    def split(text: str) -> tuple[str, list[str]]:
        first, _, rest = text.partition("\n")
        return first, rest.splitlines()

    return split
