"""HTTP trigger for sync runs."""
