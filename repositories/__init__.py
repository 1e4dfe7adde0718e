from repositories.customer import CustomerRepository, InMemoryCustomerRepository, SqlAlchemyCustomerRepository

__all__ = [
    "CustomerRepository",
    "InMemoryCustomerRepository",
    "SqlAlchemyCustomerRepository",
]
