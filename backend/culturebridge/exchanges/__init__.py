"""Cultural exchange participation."""
