from .booking import Booking, Traveler
from .payment import Payment
from .credit_account import CreditAccount
from .credit_transaction import CreditTransaction
