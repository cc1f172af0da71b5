"""drupal-config-sync: local model of a Drupal configuration export."""

__version__ = "0.1.0"
