from database import Repository


class AddressRepository(Repository):
    collection_name = "addresses"
