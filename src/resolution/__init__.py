"""Resolution of target specifications into ordered module lists."""
