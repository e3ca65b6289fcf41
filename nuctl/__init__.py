"""nuctl: manage function definitions and drive the CLI from integration tests."""
