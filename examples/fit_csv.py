import matplotlib.pyplot as plt
import numpy as np

from modelfit import ActivationKind, ModelFit
from modelfit.data.table import DataTable
from modelfit.visualize import plot_error_history, plot_fit


random_state = np.random.RandomState(1234)


# Create a toy dataset and write it to disk ###################################

x = np.linspace(0, 500, 41)
y = 150 * np.sin(x / 160) + random_state.randn(x.shape[0]) * 5

table = DataTable(column_names=['distance', 'height'])
for row in zip(x, y):
    table.add_raw_row(['{:.6f}'.format(value) for value in row])
table.write_csv('dataset.csv')


# Read the training columns back ##############################################

table = DataTable.read_csv('dataset.csv', header=True)
x, y = table.training_columns(predictor='distance', response='height')


# Set up the model and fit it #################################################

model = ModelFit(
    n_hidden_units=6,
    hidden_kind=ActivationKind.TANH,
    output_kind=ActivationKind.LINEAR,
    learning_constant=0.1,
    momentum=0.5,
    scale_factor=1000,
    max_iters=5000,
    min_network_error=2.0,
    random_state=random_state,
)

result = model.fit(x, y, log_filename='fit-log.txt', log_interval=250)

print("Converged: {}, iterations: {}, network error: {:.4f}".format(
    result.converged, result.iterations, result.network_error))

model.save('model.txt')
model.write_response_csv('model-response.csv', predictor_name='distance',
                         response_name='height')


# Show the fit ################################################################

fig, (ax_fit, ax_err) = plt.subplots(1, 2, figsize=(10, 4))
plot_fit(model, ax=ax_fit)
plot_error_history(result.errors, ax=ax_err,
                   min_network_error=model.min_network_error)
plt.tight_layout()
plt.show()
