"""Qt view-model layer: signals and user-action forwarding for the curve model."""
