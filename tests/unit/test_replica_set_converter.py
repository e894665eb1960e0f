# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Unit tests for the compose service → ReplicaSet translation.
"""
import pytest
from c2k.CONVERTERS.to_replica_set import (
    ReplicaSetConverter,
    map_environment,
    map_ports,
    map_restart_policy,
    map_volumes,
    translate,
)
from c2k.MODELS.orchestration_config import OrchestrationConfig
from c2k.MODELS.replica_set import RestartPolicy
from c2k.MODELS.service_definition import ServiceDefinition
from c2k.exceptions import (
    InvalidPortError,
    InvalidVolumeError,
    TranslationErrorGroup,
    UnknownRestartPolicyError,
)


class TestPorts:
    """Tests for port mapping."""

    def test_container_port_only(self):
        assert [p.container_port for p in map_ports("web", ["80"])] == [80]

    def test_host_port_is_dropped(self):
        assert [p.container_port for p in map_ports("web", ["8080:80"])] == [80]

    def test_quotes_and_padding(self):
        assert [p.container_port for p in map_ports("dns", [' "53" '])] == [53]

    @pytest.mark.parametrize("raw", ['"53"', ' 53 ', '" 53 "', '\t"53"\n', ' "8053:53" '])
    def test_quote_and_whitespace_combinations(self, raw):
        assert [p.container_port for p in map_ports("dns", [raw])] == [53]

    def test_order_and_duplicates_kept(self):
        ports = map_ports("web", ["443", "80", "8080:80"])
        assert [p.container_port for p in ports] == [443, 80, 80]

    def test_zero_and_negative_pass_through(self):
        assert [p.container_port for p in map_ports("web", ["0", "-1"])] == [0, -1]

    def test_multi_colon_takes_second_field(self):
        assert [p.container_port for p in map_ports("web", ["1:2:3"])] == [2]

    @pytest.mark.parametrize("raw", ["abc", "", "80/tcp", "1_000", "8080:", "2147483648"])
    def test_invalid(self, raw):
        with pytest.raises(InvalidPortError) as exc:
            map_ports("web", [raw])
        assert exc.value.service == "web"
        assert exc.value.value == raw


class TestEnvironment:
    """Tests for environment mapping."""

    def test_key_value(self):
        env = map_environment(["KEY=VALUE"])
        assert [(e.name, e.value) for e in env] == [("KEY", "VALUE")]

    def test_value_truncated_at_second_equals(self):
        env = map_environment(["KEY=A=B"])
        assert [(e.name, e.value) for e in env] == [("KEY", "A")]

    def test_entry_without_equals_dropped(self):
        env = map_environment(["NOEQUALS", "A=1"])
        assert [(e.name, e.value) for e in env] == [("A", "1")]

    def test_empty_value(self):
        env = map_environment(["EMPTY="])
        assert [(e.name, e.value) for e in env] == [("EMPTY", "")]


class TestVolumes:
    """Tests for volume mapping."""

    def test_host_and_container(self):
        mounts, volumes = map_volumes("db", ["/data/db:/var/lib/db"])
        assert mounts[0].name == "datadb"
        assert mounts[0].mount_path == "/var/lib/db"
        assert mounts[0].read_only is False
        assert volumes[0].name == "datadb"
        assert volumes[0].host_path.path == "/data/db"

    def test_read_only(self):
        mounts, _ = map_volumes("db", ["/a:/b:ro"])
        assert mounts[0].read_only is True

    def test_read_write(self):
        mounts, _ = map_volumes("db", ["/a:/b:rw"])
        assert mounts[0].read_only is False

    def test_last_mode_wins(self):
        mounts, _ = map_volumes("db", ["/a:/b:ro:rw", "/c:/d:rw:ro"])
        assert [m.read_only for m in mounts] == [False, True]

    def test_unknown_mode_ignored(self):
        mounts, _ = map_volumes("db", ["/a:/b:z", "/c:/d:z:ro"])
        assert [m.read_only for m in mounts] == [False, True]

    def test_relative_host_path(self):
        mounts, volumes = map_volumes("db", ["./conf:/etc/app"])
        assert mounts[0].name == ".conf"
        assert volumes[0].host_path.path == "./conf"

    def test_colliding_names_are_kept(self):
        # "/a/b" and "/ab" both become "ab"; nothing is deduplicated
        mounts, volumes = map_volumes("db", ["/a/b:/x", "/ab:/y"])
        assert [m.name for m in mounts] == ["ab", "ab"]
        assert [v.name for v in volumes] == ["ab", "ab"]

    def test_mounts_and_volumes_pair_up(self):
        raw = ["/one:/1", "/two/dir:/2:ro", "/three:/3:rw"]
        mounts, volumes = map_volumes("db", raw)
        assert len(mounts) == len(volumes) == len(raw)
        assert [m.name for m in mounts] == [v.name for v in volumes]

    def test_missing_container_path(self):
        with pytest.raises(InvalidVolumeError) as exc:
            map_volumes("db", ["/data"])
        assert exc.value.service == "db"
        assert exc.value.value == "/data"


class TestRestartPolicy:
    """Tests for restart policy mapping."""

    @pytest.mark.parametrize("value, expected", [
        ("", RestartPolicy.ALWAYS),
        ("always", RestartPolicy.ALWAYS),
        ("no", RestartPolicy.NEVER),
        ("on-failure", RestartPolicy.ON_FAILURE),
    ])
    def test_known(self, value, expected):
        assert map_restart_policy("web", value) == expected

    @pytest.mark.parametrize("value", ["unless-stopped", "Always", "yes"])
    def test_unknown(self, value):
        with pytest.raises(UnknownRestartPolicyError) as exc:
            map_restart_policy("web", value)
        assert exc.value.value == value


def test_translate_web_service():
    service = ServiceDefinition(
        name="web",
        image="nginx",
        ports=["8080:80"],
        environment=["DEBUG=true"],
        volumes=["/host/data:/data:ro"],
        restart="",
    )
    rs = translate("web", service)

    assert rs.kind == "ReplicaSet"
    assert rs.api_version == "extensions/v1beta1"
    assert rs.metadata.name == "web"
    assert rs.metadata.labels == {"service": "web"}
    assert rs.spec.replicas == 1
    assert rs.spec.template.metadata.labels == {"service": "web"}

    pod = rs.spec.template.spec
    assert len(pod.containers) == 1
    container = pod.containers[0]
    assert container.name == "web"
    assert container.image == "nginx"
    assert [p.container_port for p in container.ports] == [80]
    assert [(e.name, e.value) for e in container.env] == [("DEBUG", "true")]
    assert [(m.name, m.mount_path, m.read_only) for m in container.volume_mounts] == [
        ("hostdata", "/data", True)
    ]
    assert [(v.name, v.host_path.path) for v in pod.volumes] == [("hostdata", "/host/data")]
    assert pod.restart_policy == RestartPolicy.ALWAYS


def test_translate_copies_command():
    service = ServiceDefinition(name="worker", image="busybox", command=["sh", "-c", "echo hi"])
    rs = translate("worker", service)
    assert rs.container.command == ["sh", "-c", "echo hi"]


def test_translate_minimal_service_omits_empty_fields():
    rs = translate("bare", ServiceDefinition(name="bare", image="alpine"))
    data = rs.to_dict()
    container = data["spec"]["template"]["spec"]["containers"][0]
    assert container == {"name": "bare", "image": "alpine"}
    assert "volumes" not in data["spec"]["template"]["spec"]
    assert data["spec"]["template"]["spec"]["restartPolicy"] == "Always"
    assert data["status"] == {"replicas": 0}


def test_translate_is_deterministic():
    service = ServiceDefinition(
        name="api",
        image="api:1",
        ports=["80", "9000:9090"],
        environment=["A=1", "B=2"],
        volumes=["/x:/y", "/z:/w:ro"],
        restart="on-failure",
    )
    assert translate("api", service).to_dict() == translate("api", service).to_dict()


def test_translate_rejects_bad_restart_after_valid_fields():
    service = ServiceDefinition(name="web", image="nginx", ports=["80"], restart="sometimes")
    with pytest.raises(UnknownRestartPolicyError):
        translate("web", service)


def test_translate_serialized_field_names():
    service = ServiceDefinition(name="web", image="nginx", ports=["80"], volumes=["/a:/b:ro"])
    data = translate("web", service).to_dict()
    assert data["apiVersion"] == "extensions/v1beta1"
    pod = data["spec"]["template"]["spec"]
    assert pod["containers"][0]["ports"] == [{"containerPort": 80}]
    assert pod["containers"][0]["volumeMounts"] == [
        {"name": "a", "mountPath": "/b", "readOnly": True}
    ]
    assert pod["volumes"] == [{"name": "a", "hostPath": {"path": "/a"}}]


class TestReplicaSetConverter:
    """Tests for translating a whole compose configuration."""

    def _config(self, **services):
        return OrchestrationConfig(services={
            name: ServiceDefinition(name=name, **spec) for name, spec in services.items()
        })

    def test_sorted_by_name(self):
        config = self._config(web={"image": "nginx"}, api={"image": "api"}, db={"image": "pg"})
        names = [rs.name for rs in ReplicaSetConverter(config).translate_all()]
        assert names == ["api", "db", "web"]

    def test_fail_fast(self):
        config = self._config(
            a={"image": "ok"},
            b={"image": "bad", "ports": ["notanumber"]},
            c={"image": "bad", "restart": "never"},
        )
        with pytest.raises(InvalidPortError) as exc:
            ReplicaSetConverter(config).translate_all()
        assert exc.value.service == "b"
        assert exc.value.value == "notanumber"

    def test_collect_errors(self):
        config = self._config(
            a={"image": "ok"},
            b={"image": "bad", "ports": ["notanumber"]},
            c={"image": "bad", "restart": "never"},
        )
        with pytest.raises(TranslationErrorGroup) as exc:
            ReplicaSetConverter(config).translate_all(collect_errors=True)
        assert [e.service for e in exc.value.errors] == ["b", "c"]
        assert "notanumber" in str(exc.value)
        assert "never" in str(exc.value)

    def test_counts_match_source(self):
        config = self._config(
            web={"image": "nginx", "ports": ["80", "443"], "volumes": ["/a:/a", "/b:/b:ro"]},
        )
        rs = ReplicaSetConverter(config).translate_all()[0]
        assert len(rs.container.ports) == 2
        assert len(rs.container.volume_mounts) == len(rs.spec.template.spec.volumes) == 2
