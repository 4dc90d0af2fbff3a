from samples.services import Repository


class Widget:
    def __init__(self, repository: Repository) -> None:
        self.repository = repository


class Gadget:
    pass
