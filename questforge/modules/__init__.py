"""Engine services, one package per component."""
