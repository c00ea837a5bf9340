from pathlib import Path

from sqlalchemy import text

from sqlsession import build_session_factory

config_path = Path(__file__).parent / "sqlsession.xml"

# The builder takes ownership of the stream and closes it
factory = build_session_factory(open(config_path, "rb"), "dev", {"timeout": "30"})

print(factory)
print(factory.configuration.settings)

"""
Other accepted forms:

- build_session_factory(stream)
- build_session_factory(stream, "prod")
- build_session_factory(stream, {"timeout": "30"})
- build_session_factory(configuration)
"""

with factory.open_session() as session:
    print(session.execute(text("SELECT 1")).scalar())

factory.dispose()
