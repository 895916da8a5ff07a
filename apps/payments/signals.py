from django.dispatch import Signal

# Sent after a client payment is recorded. kwargs: transaction, gig
payment_confirmed = Signal()

# Sent after held funds are released to the student. kwargs: transaction, gig
payout_released = Signal()
