from shard_dump.cli.app import app

app()
