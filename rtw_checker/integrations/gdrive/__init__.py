"""Google Drive upload function client and record document sync."""
