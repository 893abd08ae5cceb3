# kubehelper

kubehelper runs Model Context Protocol (MCP) servers that let an assistant look at a Kubernetes
cluster. It talks to the Kubernetes API directly over HTTPS, using the settings from a kubeconfig
file or from the in-cluster service account.

## Installation

```
pip install .
```

## Commands

```
kubehelper version
kubehelper run
kubehelper k8sgpt
```

- `kubehelper version` prints `version <version> - <commit>`.
- `kubehelper run` serves the `kubernetes_helper` tools.
- `kubehelper k8sgpt` serves the `k8sgpt_helper` tools.
- Run with no subcommand, `kubehelper` prints its help. `kubehelper --version` also prints the
  version.

Options accepted before or after the subcommand:

- `-c`, `--kubeconfig PATH`: the kubeconfig file to use.
- `--debug`: turn on debug logging.

Options of `run` and `k8sgpt`:

- `--sse`: serve over server-sent events instead of stdio.
- `-l`, `--listen ADDRESS`: the address used in the advertised base URL (default `127.0.0.1`).
  The HTTP server itself binds to all interfaces.
- `-p`, `--port PORT`: the port to listen on (default `8000`).

Examples:

```
kubehelper --kubeconfig ~/.kube/config run
kubehelper run --sse --listen 127.0.0.1 --port 8000
kubehelper k8sgpt --sse -p 8001
```

Without `--sse`, the server reads newline-delimited JSON-RPC messages from stdin and writes
answers to stdout until stdin ends. With `--sse`, a client opens `GET /sse`, receives an
`endpoint` event naming `/message?sessionId=...`, and posts its requests there; answers arrive
as `message` events on the stream.

The first SIGINT or SIGTERM stops the server; a second one exits at once with status 130.

Log records at warning level and above go to stderr; info and debug records go to stdout.

## Kubeconfig lookup

In order: the `--kubeconfig` path; the first entry of `KUBECONFIG`; the in-cluster service
account when `KUBERNETES_SERVICE_HOST` is set; `~/.kube/config`. From the current context it
uses the cluster server, the CA certificate (file or inline data), `insecure-skip-tls-verify`,
and the user's bearer token, token file, or client certificate and key.

## The `kubernetes_helper` tools

- `list_resources`: lists pods, deployments, statefulsets, daemonsets, jobs, cronjobs, services,
  namespaces, nodes or events as a compact JSON array of summaries (name, namespace, kind and,
  where it applies, status such as replica counts and conditions). Arguments: `resource`
  (required), `namespace` (empty or `*` means all namespaces), `limit`, and `labels`, a list of
  label selectors joined with commas. The tool schema advertises a default limit of 50; when the
  client sends no limit, none is applied.
- `get_single_resource`: fetches one pod, deployment, statefulset, daemonset, job, cronjob,
  service, namespace or node as indented JSON, with `managedFields` removed. Arguments:
  `resource`, `name` (both required) and `namespace`. For a namespace, the `namespace` argument
  names the namespace to fetch.

Resource kinds are case-insensitive and may be plural. Unsupported kinds and API failures come
back as tool errors.

## The `k8sgpt_helper` tools

These work with the K8sGPT resource `k8sgpt-cluster-check` in the `k8sgpt-operator-system`
namespace.

- `check_cluster`: creates the resource, or resets its spec to the default if it differs.
- `get_check_results`: returns the operator's results (name, details, kind) as JSON.
- `remediate_cluster`: turns on auto-remediation in the existing resource; if there is none, it
  asks for `check_cluster` to be run first.
- `get_mutation_result`: returns each mutation's resource reference and status as JSON.

The default spec uses the `openai` backend with the `gpt-4.1-mini` model, checks pods and
deployments, and reads the API key from the secret `k8sgpt-openai-api-key` under the key
`api-key`. If `HTTPS_PROXY` is set, its value becomes the proxy endpoint. Updates are retried
a few times on conflicts.

## Library use

`kubehelper.kubeclient.KubeClient` (built from `load_kubeconfig()`) gets, lists, creates and
updates objects of the kinds in `ResourceKind`. `kubehelper.helper.KubeHelper` and
`kubehelper.k8sgpt.K8sGPTHelper` expose the tools above as methods, and their `server()`
returns a `kubehelper.mcp.McpServer`.

## Limitations

- Only the kubeconfig settings listed above are understood; exec and auth-provider credential
  plugins are not supported.
- The tools only read resources, apart from creating and updating the K8sGPT resource.
- The servers answer `initialize`, `ping`, `tools/list`, `tools/call`, `logging/setLevel`, and
  return empty lists for `resources/list` and `resources/templates/list`.

## Development

```
pip install -e ".[test]"
pytest
```