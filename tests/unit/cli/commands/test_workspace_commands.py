"""Unit tests for the workspace commands."""

from timebill.tracking import get_current_workspace_id


class TestWorkspaceCommands:
    """Test suite for workspace list/use/current."""

    def test_list_marks_current(self, invoke):
        result = invoke(["workspace", "list"])

        assert result.exit_code == 0
        assert "| * | ws-1 | Acme Studio | acme |" in result.output

    def test_list_empty(self, invoke, api):
        api.list_workspaces.return_value = []

        result = invoke(["workspace", "list"])

        assert result.exit_code == 0
        assert "No workspaces found." in result.output

    def test_use_remembers_workspace(self, invoke, store, api):
        """Test that use stores the id and warms the cache."""
        store.delete("current-workspace-id")

        result = invoke(["workspace", "use", "ws-1"])

        assert result.exit_code == 0
        assert "Using workspace Acme Studio (ws-1)" in result.output
        assert get_current_workspace_id(store) == "ws-1"

    def test_use_unknown_workspace(self, invoke, store):
        result = invoke(["workspace", "use", "ws-9"])

        assert result.exit_code == 7
        assert "Workspace ws-9 not found" in result.output
        assert get_current_workspace_id(store) == "ws-1"

    def test_current(self, invoke, store):
        assert invoke(["workspace", "current"]).output.strip() == "ws-1"

        store.delete("current-workspace-id")

        assert "No workspace selected." in invoke(["workspace", "current"]).output
