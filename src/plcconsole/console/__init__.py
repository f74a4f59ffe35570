"""Console input/output, message rendering and progress display."""
