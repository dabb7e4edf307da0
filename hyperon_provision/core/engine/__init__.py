"""Engine: the fail-fast step orchestrator."""
