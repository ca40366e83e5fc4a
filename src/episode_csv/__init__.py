"""Parse, repair and reconcile scraped episode-metadata exports."""
