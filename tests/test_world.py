from jobboard.ticket import ResourceKind, TicketKind, TicketScope
from jobboard.world import (
    AnnouncementDefinition,
    ModifierRule,
    ProviderDirectory,
    ResourceProvider,
    WorldBlackboard,
)

from conftest import make_ticket


def test_rule_filters_are_conjunctive():
    rule = ModifierRule(kind=TicketKind.FETCH, scope=TicketScope.PUBLIC, multiplier=3.0)
    assert rule.matches(make_ticket(scope=TicketScope.PUBLIC))
    assert not rule.matches(make_ticket(scope=TicketScope.FAMILY_ONLY))
    assert not rule.matches(make_ticket(kind=TicketKind.COOK))
    assert ModifierRule().matches(make_ticket(kind=TicketKind.REPAIR))


def test_definition_multiplies_matching_rules():
    definition = AnnouncementDefinition(
        type="festival",
        rules=[
            ModifierRule(kind=TicketKind.FETCH, multiplier=2.0),
            ModifierRule(resource=ResourceKind.FOOD, multiplier=1.5),
        ],
    )
    assert definition.multiplier_for(make_ticket(resource=ResourceKind.FOOD)) == 3.0
    assert definition.multiplier_for(make_ticket(resource=ResourceKind.WATER)) == 2.0
    assert definition.multiplier_for(make_ticket(kind=TicketKind.CLEAN)) is None


def test_blackboard_activation():
    world = WorldBlackboard()
    world.register(AnnouncementDefinition(type="drought"))
    assert not world.has_active("drought")
    assert world.set_active("drought", True)
    assert world.has_active("drought")
    assert not world.set_active("flood", True)


def test_multiplier_multiplies_matching_active_rules():
    world = WorldBlackboard()
    world.register(
        AnnouncementDefinition(type="rush", rules=[ModifierRule(multiplier=1.25)]),
        active=True,
    )
    world.register(
        AnnouncementDefinition(type="festival", rules=[ModifierRule(kind=TicketKind.COOK, multiplier=3.0)]),
        active=True,
    )
    assert world.get_multiplier_for(make_ticket()) == 1.25
    assert world.get_multiplier_for(make_ticket(kind=TicketKind.COOK)) == 3.75


def test_nearest_capable_provider_wins():
    directory = ProviderDirectory()
    far = ResourceProvider(name="far", provides=ResourceKind.WATER, position=(5.0, 0.0))
    near = ResourceProvider(name="near", provides=ResourceKind.WATER, position=(2.0, 0.0))
    food = ResourceProvider(name="market", provides=ResourceKind.FOOD, position=(0.5, 0.0))
    for p in (far, near, food):
        directory.register(p)

    assert directory.find_best_provider(ResourceKind.WATER, 20, (0.0, 0.0)) is near
    assert directory.find_best_provider(ResourceKind.WATER, 20, (6.0, 0.0)) is far
    assert directory.find_best_provider(ResourceKind.FUEL, 1, (0.0, 0.0)) is None


def test_finite_provider_stock():
    well = ResourceProvider(provides=ResourceKind.WATER, infinite_stock=False, stock_units=15)
    directory = ProviderDirectory()
    directory.register(well)
    directory.register(well)
    assert len(directory.providers) == 1

    assert directory.find_best_provider(ResourceKind.WATER, 20, (0.0, 0.0)) is None
    assert well.can_provide(10)
    assert well.take(10) == 10
    assert well.take(10) == 5
    assert well.stock_units == 0
    assert well.take(0) == 0


def test_unregister():
    directory = ProviderDirectory()
    p = ResourceProvider(provides=ResourceKind.FUEL)
    directory.register(p)
    directory.unregister(p)
    assert directory.find_best_provider(ResourceKind.FUEL, 1, (0.0, 0.0)) is None
