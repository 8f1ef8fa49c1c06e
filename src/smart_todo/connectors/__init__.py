"""Front-ends that drive the task operations."""
