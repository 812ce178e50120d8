import nox

PYTHON_VERSIONS = ["3.11", "3.12", "3.13"]


def _install(session: nox.Session) -> None:
    """Install the project with its test extras into the nox virtualenv."""
    session.run(
        "poetry",
        "install",
        "--extras",
        "test",
        external=True,
    )


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Run full test suite across Python versions."""
    _install(session)
    session.run("pytest")


@nox.session(python=PYTHON_VERSIONS)
def tests_domain(session: nox.Session) -> None:
    """Run domain-layer tests only (no infrastructure required)."""
    _install(session)
    session.run("pytest", "tests/storefront/domain/")


@nox.session(python=PYTHON_VERSIONS[-1])
def loadtest(session: nox.Session) -> None:
    """Headless checkout contention run against a server on localhost:8000."""
    session.run("poetry", "install", "--extras", "loadtest", external=True)
    session.run(
        "locust",
        "-f",
        "loadtests/locustfile.py",
        "ScarceStockShopper",
        "--headless",
        "-u",
        "50",
        "-r",
        "10",
        "-t",
        "60s",
        "--host",
        "http://localhost:8000",
    )
