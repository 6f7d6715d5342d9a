"""nox build configuration for Medallion."""

import nox

# Default sessions
nox.options.sessions = ["typing", "test"]

# Other nox defaults
nox.options.default_venv_backend = "venv"
nox.options.reuse_existing_virtualenvs = True


def _install(session: nox.Session) -> None:
    """Install the package with its test dependencies."""
    session.install("-e", ".[test]")


@nox.session
def typing(session: nox.Session) -> None:
    """Check type annotations with mypy."""
    _install(session)
    session.run("mypy", *session.posargs, "noxfile.py", "src", "tests")


@nox.session
def test(session: nox.Session) -> None:
    """Run the test suite."""
    _install(session)
    session.run("pytest", *session.posargs)


@nox.session
def coverage(session: nox.Session) -> None:
    """Run the test suite with coverage reporting."""
    _install(session)
    session.run(
        "pytest",
        "--cov=medallion",
        "--cov-branch",
        "--cov-report=term-missing",
        *session.posargs,
    )
