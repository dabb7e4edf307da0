"""Package manager adapters: apt, pip, cargo."""
