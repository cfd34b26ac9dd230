"""Image enhancement relay backed by Replicate."""
