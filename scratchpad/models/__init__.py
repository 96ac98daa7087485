"""Request and response models for the Scratchpad API."""
