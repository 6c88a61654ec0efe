"""Terminal quiz runner with a persistent wrong-answer ledger."""
