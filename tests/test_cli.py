import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from unittest import mock

from flowgraph.adapters.chain.static_chain_adapter import StaticChainAdapter
from flowgraph.cli import main as cli
from flowgraph.core.errors import TransportError

from helpers import ALPHA, ONE_TOKEN, TOKEN, WALLET_1, transfer_log


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.out_dir = os.path.join(self._tmp.name, "data")
        self.protocols = os.path.join(self._tmp.name, "protocols.json")
        with open(self.protocols, "w", encoding="utf-8") as f:
            json.dump({"Alpha": {"contracts": [ALPHA], "category": "dex"}}, f)

        # no .env file may leak into the tests
        patcher = mock.patch("flowgraph.config.settings.load_dotenv")
        patcher.start()
        self.addCleanup(patcher.stop)

    def _run(self, argv, env):
        out, err = io.StringIO(), io.StringIO()
        with mock.patch.dict(os.environ, env, clear=True), redirect_stdout(out), redirect_stderr(err):
            code = cli.main(argv)
        return code, out.getvalue(), err.getvalue()

    def test_missing_config_exits_before_network(self) -> None:
        with mock.patch.object(cli, "JsonRpcChainAdapter") as adapter:
            code, _, err = self._run([], {"MON_TOKEN_ADDRESS": TOKEN})

        self.assertEqual(code, 1)
        self.assertIn("BLOCKVISION_RPC_URL is not set.", err)
        adapter.assert_not_called()

    def test_successful_run_writes_both_periods(self) -> None:
        chain = StaticChainAdapter(head=1000, logs=[transfer_log(WALLET_1, ALPHA, ONE_TOKEN, block_number=999)])
        env = {"BLOCKVISION_RPC_URL": "https://rpc.example", "MON_TOKEN_ADDRESS": TOKEN}

        with mock.patch.object(cli, "JsonRpcChainAdapter", return_value=chain) as adapter:
            code, out, _ = self._run(["--protocols", self.protocols, "--out", self.out_dir], env)

        self.assertEqual(code, 0)
        adapter.assert_called_once_with("https://rpc.example", timeout_sec=30)
        self.assertIn("Wrote:", out)
        for label in ("24h", "7d"):
            with open(os.path.join(self.out_dir, f"mon_flows_{label}.json"), "r", encoding="utf-8") as f:
                doc = json.load(f)
            self.assertEqual(doc["period"], label)
            self.assertEqual(doc["flows"], [{"source": "Wallets", "target": "Alpha", "volume": 1.0}])
            self.assertEqual(doc["totalVolume"], 1.0)

    def test_transport_failure_exits_1_without_output(self) -> None:
        chain = mock.Mock()
        chain.get_block_number.side_effect = TransportError("RPC error -32000: boom")
        env = {"BLOCKVISION_RPC_URL": "https://rpc.example", "MON_TOKEN_ADDRESS": TOKEN}

        with mock.patch.object(cli, "JsonRpcChainAdapter", return_value=chain):
            code, _, err = self._run(["--protocols", self.protocols, "--out", self.out_dir], env)

        self.assertEqual(code, 1)
        self.assertIn("TransportError", err)
        self.assertFalse(os.path.exists(self.out_dir))

    def test_negative_flag_values_exit_before_network(self) -> None:
        env = {"BLOCKVISION_RPC_URL": "https://rpc.example", "MON_TOKEN_ADDRESS": TOKEN}
        for flag in ("--decimals", "--max-block-range"):
            with self.subTest(flag=flag):
                with mock.patch.object(cli, "JsonRpcChainAdapter") as adapter:
                    code, _, err = self._run(["--protocols", self.protocols, "--out", self.out_dir, flag, "-1"], env)

                self.assertEqual(code, 1)
                self.assertIn("must be >= 0", err)
                adapter.assert_not_called()
                self.assertFalse(os.path.exists(self.out_dir))

    def test_registry_collision_in_strict_mode_fails(self) -> None:
        with open(self.protocols, "w", encoding="utf-8") as f:
            json.dump({"Alpha": {"contracts": [ALPHA]}, "Beta": {"contracts": [ALPHA]}}, f)
        env = {"BLOCKVISION_RPC_URL": "https://rpc.example", "MON_TOKEN_ADDRESS": TOKEN}

        with mock.patch.object(cli, "JsonRpcChainAdapter") as adapter:
            code, _, err = self._run(["--protocols", self.protocols, "--strict-registry"], env)

        self.assertEqual(code, 1)
        self.assertIn("ConfigurationError", err)
        adapter.assert_not_called()


if __name__ == "__main__":
    unittest.main()
