"""Generation pipeline: submission, polling, retrieval and composition."""
