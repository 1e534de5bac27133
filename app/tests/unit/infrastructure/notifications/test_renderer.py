"""Unit tests for PayloadRenderer."""

import pytest

from infrastructure.notifications.models import AttributeStyle, ChannelOption
from infrastructure.notifications.renderer import PayloadRenderer
from tests.factories.notifications import (
    make_attribute,
    make_attributes,
    make_notification,
)

CHANNEL = ChannelOption(id="2", name="Customer Service", description="Channel ID")


@pytest.mark.unit
class TestPayloadRenderer:
    """Tests for render()."""

    def test_maps_notification_fields(self):
        notification = make_notification(
            title="Invoice Paid",
            message="Invoice #1042 was paid",
            url="https://billing.example.com/invoices/1042",
        )

        payload = PayloadRenderer().render(notification, CHANNEL, {"botname": "Billing Bot"})

        assert payload.channel == "2"
        assert payload.title == "Invoice Paid"
        assert payload.message == "Invoice #1042 was paid"
        assert payload.url == "https://billing.example.com/invoices/1042"
        assert payload.sender == "Billing Bot"

    @pytest.mark.parametrize("count", [0, 1, 5])
    def test_attribute_order_is_preserved(self, count):
        attributes = make_attributes(count)

        payload = PayloadRenderer().render(make_notification(attributes=attributes), CHANNEL)

        assert [a.label for a in payload.attributes] == [a.label for a in attributes]
        assert [a.value for a in payload.attributes] == [a.value for a in attributes]

    def test_attribute_fields_are_rendered(self):
        attribute = make_attribute(
            label="Status",
            value="Overdue",
            url="https://billing.example.com/invoices/7",
            style=AttributeStyle.DANGER,
            icon=":warning:",
        )

        payload = PayloadRenderer().render(make_notification(attributes=[attribute]), CHANNEL)

        rendered = payload.attributes[0]
        assert rendered.style == "danger"
        assert rendered.icon == ":warning:"
        assert rendered.url == "https://billing.example.com/invoices/7"

    def test_render_is_deterministic(self):
        notification = make_notification(attributes=make_attributes(3))
        renderer = PayloadRenderer()

        first = renderer.render(notification, CHANNEL, {"botname": "Billing Bot"})
        second = renderer.render(notification, CHANNEL, {"botname": "Billing Bot"})

        assert first == second
        assert first.to_json() == second.to_json()

    @pytest.mark.parametrize("settings", [None, {}, {"botname": "  "}])
    def test_blank_sender_is_omitted(self, settings):
        payload = PayloadRenderer().render(make_notification(), CHANNEL, settings)

        assert payload.sender is None

    def test_empty_url_is_normalised_to_none(self):
        payload = PayloadRenderer().render(make_notification(url=""), CHANNEL)

        assert payload.url is None

    def test_render_does_not_modify_inputs(self):
        notification = make_notification(attributes=make_attributes(2))
        settings = {"botname": "Billing Bot", "channel": "2"}
        before = notification.model_dump()

        PayloadRenderer().render(notification, CHANNEL, settings)

        assert notification.model_dump() == before
        assert settings == {"botname": "Billing Bot", "channel": "2"}

    def test_custom_sender_field(self):
        payload = PayloadRenderer(sender_field="username").render(
            make_notification(), CHANNEL, {"username": "Ops"}
        )

        assert payload.sender == "Ops"
