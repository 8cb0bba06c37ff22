from event_batcher.cli.runner import run_cli

run_cli()
