"""HTTP relay that forwards push notification requests to Expo."""
