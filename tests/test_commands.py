"""
Tests for the CLI commands.

The client, discovery and pairing layers are mocked; these tests check what the
commands send and print.
"""

from unittest.mock import MagicMock, patch

from click.testing import CliRunner

from hue_control import cli
from huelink.exceptions import NoTransportError, NotFoundError, PairingTimeout, UnauthorizedError
from models.bridge import BridgeDescriptor, Credential
from models.light import Light, LightState


def make_lights():
    return {
        '1': Light('1', 'Bedroom', LightState(on=True, brightness=200, reachable=True), 'Dimmable light'),
        '2': Light('2', 'Kitchen', LightState(on=False, reachable=False), 'Extended color light'),
    }


def mock_client():
    client = MagicMock()
    lights = make_lights()
    client.list_lights.return_value = lights
    client.get_light.side_effect = lambda light_id: lights[str(light_id)]
    client.find_light.side_effect = lambda name: next(
        (l for l in lights.values() if l.name.lower() == name.lower()), None)
    return client


class TestLightsCommand:
    """lights command."""

    @patch('commands.inspection.get_client')
    def test_lists_lights(self, mock_get_client):
        mock_get_client.return_value = mock_client()

        result = CliRunner().invoke(cli, ['lights'])

        assert result.exit_code == 0
        assert 'Bedroom' in result.output
        assert 'Kitchen' in result.output
        assert 'unreachable' in result.output

    @patch('commands.inspection.get_client')
    def test_no_lights(self, mock_get_client):
        client = mock_client()
        client.list_lights.return_value = {}
        mock_get_client.return_value = client

        result = CliRunner().invoke(cli, ['lights'])

        assert result.exit_code == 0
        assert 'No lights found' in result.output

    @patch('commands.inspection.get_client')
    def test_unauthorized_suggests_pairing(self, mock_get_client):
        client = mock_client()
        client.list_lights.side_effect = UnauthorizedError(1, 'unauthorized user', '/lights')
        mock_get_client.return_value = client

        result = CliRunner().invoke(cli, ['lights'])

        assert result.exit_code == 0
        assert 'configure' in result.output

    @patch('commands.inspection.get_client')
    def test_not_configured(self, mock_get_client):
        mock_get_client.return_value = None
        result = CliRunner().invoke(cli, ['lights'])
        assert result.exit_code == 0


class TestStatusCommand:
    """status command."""

    @patch('commands.inspection.get_client')
    def test_status_by_id(self, mock_get_client):
        mock_get_client.return_value = mock_client()
        result = CliRunner().invoke(cli, ['status', '1'])
        assert result.exit_code == 0
        assert 'Bedroom' in result.output
        assert 'Dimmable light' in result.output

    @patch('commands.inspection.get_client')
    def test_status_unknown(self, mock_get_client):
        client = mock_client()
        client.get_light.side_effect = NotFoundError(3, 'resource, /lights/9, not available')
        mock_get_client.return_value = client

        result = CliRunner().invoke(cli, ['status', '9'])

        assert "Light '9' not found" in result.output


class TestControlCommands:
    """power, brightness and colour commands send partial updates."""

    @patch('commands.control.get_client')
    def test_power_off_by_name(self, mock_get_client):
        client = mock_client()
        mock_get_client.return_value = client

        result = CliRunner().invoke(cli, ['power', 'bedroom', '--off'])

        assert result.exit_code == 0
        client.set_light_state.assert_called_once_with('1', LightState(on=False))
        assert 'turned OFF' in result.output

    @patch('commands.control.get_client')
    def test_brightness_sends_only_brightness(self, mock_get_client):
        client = mock_client()
        mock_get_client.return_value = client

        result = CliRunner().invoke(cli, ['brightness', '1', '200'])

        assert result.exit_code == 0
        client.set_light_state.assert_called_once_with('1', LightState(brightness=200))

    @patch('commands.control.get_client')
    def test_brightness_out_of_range(self, mock_get_client):
        mock_get_client.return_value = mock_client()
        result = CliRunner().invoke(cli, ['brightness', '1', '300'])
        assert result.exit_code != 0

    @patch('commands.control.get_client')
    def test_colour_temperature(self, mock_get_client):
        client = mock_client()
        mock_get_client.return_value = client

        result = CliRunner().invoke(cli, ['colour', 'Kitchen', '--ct', '366'])

        assert result.exit_code == 0
        client.set_light_state.assert_called_once_with('2', LightState(color_temperature=366))

    @patch('commands.control.get_client')
    def test_colour_hue_and_sat(self, mock_get_client):
        client = mock_client()
        mock_get_client.return_value = client

        CliRunner().invoke(cli, ['colour', 'Kitchen', '-u', '10000', '-s', '254'])

        client.set_light_state.assert_called_once_with('2', LightState(hue=10000, saturation=254))

    @patch('commands.control.get_client')
    def test_colour_requires_an_option(self, mock_get_client):
        client = mock_client()
        mock_get_client.return_value = client
        result = CliRunner().invoke(cli, ['colour', 'Kitchen'])
        assert 'Please specify' in result.output
        client.set_light_state.assert_not_called()

    @patch('commands.control.get_client')
    def test_partial_failure_reports_applied_fields(self, mock_get_client):
        client = mock_client()
        error = UnauthorizedError(1, 'unauthorized user')
        error.applied = {'on': True}
        client.set_light_state.side_effect = error
        mock_get_client.return_value = client

        result = CliRunner().invoke(cli, ['power', '1', '--on'])

        assert 'unauthorized user' in result.output
        assert 'on=True' in result.output

    @patch('commands.control.get_client')
    def test_unknown_light(self, mock_get_client):
        client = mock_client()
        mock_get_client.return_value = client
        result = CliRunner().invoke(cli, ['power', 'Garage'])
        assert "Light 'Garage' not found" in result.output
        client.set_light_state.assert_not_called()


class TestDiscoverCommand:
    """discover command."""

    @patch('commands.setup.discover')
    def test_lists_bridges(self, mock_discover):
        mock_discover.return_value = iter([BridgeDescriptor('192.168.1.2', 'abc', 'Living room')])
        result = CliRunner().invoke(cli, ['discover', '-t', '1'])
        assert result.exit_code == 0
        assert 'Living room (192.168.1.2)' in result.output
        assert mock_discover.call_args.kwargs['strategies'] == ('local', 'remote')

    @patch('commands.setup.discover')
    def test_local_only(self, mock_discover):
        mock_discover.return_value = iter([])
        result = CliRunner().invoke(cli, ['discover', '--local-only'])
        assert 'No bridges found' in result.output
        assert mock_discover.call_args.kwargs['strategies'] == ('local',)

    def test_conflicting_flags(self):
        result = CliRunner().invoke(cli, ['discover', '--local-only', '--remote-only'])
        assert result.exit_code != 0

    @patch('commands.setup.discover')
    def test_socket_failure(self, mock_discover):
        mock_discover.side_effect = NoTransportError('Address in use')
        result = CliRunner().invoke(cli, ['discover'])
        assert result.exit_code == 0
        assert 'Bridge discovery failed' in result.output


class TestConfigureCommand:
    """configure command."""

    @patch('commands.setup.save_stored_credentials')
    @patch('commands.setup.PairingSession')
    def test_pairs_with_given_bridge(self, mock_session_class, mock_save):
        mock_session_class.return_value.request_credential.return_value = Credential('new-token')
        mock_save.return_value = True

        result = CliRunner().invoke(cli, ['configure', '--bridge', '192.168.1.2', '--max-wait', '10'])

        assert result.exit_code == 0
        assert 'LINK BUTTON' in result.output
        assert mock_session_class.call_args.args[0] == BridgeDescriptor('192.168.1.2')
        mock_session_class.return_value.request_credential.assert_called_once_with('hue_link#cli', 1.0, 10.0)
        mock_save.assert_called_once_with(BridgeDescriptor('192.168.1.2'), Credential('new-token'))

    @patch('commands.setup.save_stored_credentials')
    @patch('commands.setup.PairingSession')
    def test_timeout_saves_nothing(self, mock_session_class, mock_save):
        mock_session_class.return_value.request_credential.side_effect = PairingTimeout(30.0)

        result = CliRunner().invoke(cli, ['configure', '--bridge', '192.168.1.2'])

        assert 'Failed to create API credentials' in result.output
        mock_save.assert_not_called()

    @patch('commands.setup.save_stored_credentials')
    @patch('commands.setup.PairingSession')
    @patch('commands.setup.discover')
    def test_discovers_single_bridge(self, mock_discover, mock_session_class, mock_save):
        bridge = BridgeDescriptor('192.168.1.2', 'abc')
        mock_discover.return_value = iter([bridge])
        mock_session_class.return_value.request_credential.return_value = Credential('tok')
        mock_save.return_value = True

        result = CliRunner().invoke(cli, ['configure'], input='y\n')

        assert result.exit_code == 0
        assert mock_session_class.call_args.args[0] == bridge
        mock_save.assert_called_once_with(bridge, Credential('tok'))

    @patch('commands.setup.PairingSession')
    @patch('commands.setup.discover')
    def test_selects_among_bridges(self, mock_discover, mock_session_class):
        bridges = [BridgeDescriptor('192.168.1.2', 'abc'), BridgeDescriptor('10.0.0.5', 'def')]
        mock_discover.return_value = iter(bridges)
        mock_session_class.return_value.request_credential.side_effect = PairingTimeout(1.0)

        CliRunner().invoke(cli, ['configure'], input='2\n')

        assert mock_session_class.call_args.args[0] == bridges[1]


class TestInvalidInput:
    """Bad options and settings are reported, not raised as tracebacks."""

    @patch('commands.setup.discover')
    def test_negative_discovery_timeout_rejected(self, mock_discover):
        result = CliRunner().invoke(cli, ['discover', '--timeout', '-1'])
        assert result.exit_code == 2
        assert 'Invalid value' in result.output
        mock_discover.assert_not_called()

    @patch('commands.setup.PairingSession')
    def test_empty_device_name_rejected(self, mock_session_class):
        result = CliRunner().invoke(cli, ['configure', '--bridge', '192.168.1.2', '-n', ''])
        assert result.exit_code == 2
        assert '--device-name' in result.output
        mock_session_class.assert_not_called()

    @patch('commands.setup.PairingSession')
    def test_negative_max_wait_rejected(self, mock_session_class):
        result = CliRunner().invoke(cli, ['configure', '--bridge', '192.168.1.2', '--max-wait', '-5'])
        assert result.exit_code == 2
        mock_session_class.assert_not_called()

    @patch('commands.setup.discover')
    def test_bad_scheme_setting_reported(self, mock_discover):
        result = CliRunner().invoke(cli, ['discover'], env={'HUE_SCHEME': 'gopher'})
        assert result.exit_code == 0
        assert 'HUE_SCHEME' in result.output
        mock_discover.assert_not_called()

    @patch('commands.setup.PairingSession')
    def test_bad_timeout_setting_stops_configure(self, mock_session_class):
        result = CliRunner().invoke(cli, ['configure', '--bridge', '192.168.1.2'],
                                    env={'HUE_HTTP_TIMEOUT': 'soon'})
        assert result.exit_code == 0
        assert 'HUE_HTTP_TIMEOUT' in result.output
        mock_session_class.assert_not_called()

    @patch('commands.store.load_stored_credentials')
    def test_bad_timeout_setting_stops_client(self, mock_load):
        mock_load.return_value = {'bridge_ip': '192.168.1.2', 'username': 'token'}
        result = CliRunner().invoke(cli, ['lights'], env={'HUE_HTTP_TIMEOUT': 'soon'})
        assert result.exit_code == 0
        assert 'HUE_HTTP_TIMEOUT' in result.output
