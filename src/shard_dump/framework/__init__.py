"""shard-dump framework services shared by the pipeline and the CLI."""
