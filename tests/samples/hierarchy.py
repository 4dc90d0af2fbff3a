from chainwire import post_construct


class RootClass:
    pass


class ParentA(RootClass):
    pass


class ChildA(ParentA):
    pass


class ParentB(RootClass):
    pass


class ChildB(ParentB):
    pass


class Tracked:
    def __init__(self) -> None:
        self.calls: list[str] = []

    @post_construct
    def base_hook(self) -> None:
        self.calls.append("base")


class TrackedChild(Tracked):
    @post_construct
    def child_hook(self) -> None:
        self.calls.append("child")


class CyclicA:
    def __init__(self, b: "CyclicB") -> None:
        self.b = b


class CyclicB:
    def __init__(self, a: CyclicA) -> None:
        self.a = a
