"""Nox sessions for termcast."""

import nox


PYPROJECT = nox.project.load_toml("pyproject.toml")
# requires-python bounds the interpreters below; 3.13 is the newest tested.
PYTHON_VERSIONS = nox.project.python_versions(PYPROJECT, max_version="3.13")
nox.options.default_venv_backend = "uv"


def _install_test_deps(session: nox.Session) -> None:
    deps = list(nox.project.dependency_groups(PYPROJECT, "dev"))
    session.install(".", *deps)


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Run pytest across all supported Python versions."""
    _install_test_deps(session)
    session.run("pytest", *session.posargs)


@nox.session(python="3.13")
def coverage(session: nox.Session) -> None:
    """Run tests with coverage reporting once."""
    _install_test_deps(session)
    session.run(
        "pytest",
        "--cov=termcast",
        "--cov-report=term-missing",
        *session.posargs,
    )


@nox.session(python=False)
def vendor(session: nox.Session) -> None:
    """Refresh the bundled asciinema-player files."""
    session.run("python", "scripts/vendor_player.py", "--force", *session.posargs)
