"""Arena-Core: players, headset bindings and game sessions for a VR arena."""
