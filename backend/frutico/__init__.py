"""Frutico ticket payments: Razorpay webhook ingestion and ticket delivery."""
