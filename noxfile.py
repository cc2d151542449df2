import nox

PYTHON_VERSIONS = ["3.11", "3.12", "3.13", "3.14"]

# Packages with C extensions that must be rebuilt per Python version.
# Poetry's wheel cache can serve a .so compiled for the wrong interpreter.
_C_EXT_PACKAGES = ["psycopg2"]

_CHECKOUT_TESTS = "tests/checkout"


def _install(session: nox.Session) -> None:
    """Install the checkout package with all extras (test included) into the nox virtualenv."""
    session.run("poetry", "install", "--all-extras", external=True)
    # Force-rebuild C-extension packages so the .so matches this Python version.
    session.run(
        "pip",
        "install",
        "--force-reinstall",
        "--no-cache-dir",
        *_C_EXT_PACKAGES,
    )


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Run the whole checkout suite across Python versions."""
    _install(session)
    session.run("pytest", *session.posargs)


@nox.session(python=PYTHON_VERSIONS)
def tests_domain(session: nox.Session) -> None:
    """Order aggregate, pricing and event-kind tests (no infrastructure required)."""
    _install(session)
    session.run("pytest", f"{_CHECKOUT_TESTS}/domain/", *session.posargs)


@nox.session(python=PYTHON_VERSIONS)
def tests_application(session: nox.Session) -> None:
    """Order store, webhook ingress, fulfillment and concurrency tests."""
    _install(session)
    session.run("pytest", f"{_CHECKOUT_TESTS}/application/", *session.posargs)


@nox.session(python=PYTHON_VERSIONS[-1])
def tests_integration(session: nox.Session) -> None:
    """HTTP tests for /checkout, /orders and /webhooks/stripe."""
    _install(session)
    session.run("pytest", "-m", "integration", *session.posargs)


@nox.session(python=PYTHON_VERSIONS[-1])
def tests_bdd(session: nox.Session) -> None:
    """Gherkin scenarios for webhook-driven fulfillment."""
    _install(session)
    session.run("pytest", f"{_CHECKOUT_TESTS}/bdd/", *session.posargs)


@nox.session(python=PYTHON_VERSIONS)
def tests_postgres(session: nox.Session) -> None:
    """Run the suite against the production overlay (needs a PostgreSQL server)."""
    _install(session)
    session.run("pytest", "--env", "production", *session.posargs)


@nox.session(python=PYTHON_VERSIONS[-1])
def loadtest(session: nox.Session) -> None:
    """Headless checkout journeys and duplicate deliveries against a running server.

    Pass the server as a positional argument, e.g. ``nox -s loadtest -- http://localhost:8000``.
    The server and Locust must share STRIPE_WEBHOOK_SECRET.
    """
    _install(session)
    host = session.posargs[0] if session.posargs else "http://localhost:8000"
    session.run(
        "locust",
        "-f",
        "loadtests/locustfile.py",
        "--headless",
        "--host",
        host,
        "-u",
        "20",
        "-r",
        "5",
        "-t",
        "60s",
        "--only-summary",
    )
