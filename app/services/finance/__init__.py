"""Money math: installment splitting, installment payment, cost-center allocation."""
