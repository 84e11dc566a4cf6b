"""Drawing helpers for faces and landmark sequences."""
